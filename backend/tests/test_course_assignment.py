from types import SimpleNamespace

import pytest

from app.core.exceptions import InvalidCourseIdentifierError
from app.services import course_assignment
from app.services.course_assignment import (
    AssignmentDelta,
    apply_assignment_delta,
    assigned_course_data,
    reconcile_course_assignments,
)


def test_adds_newly_selected_and_removes_deselected_courses():
    delta = reconcile_course_assignments({1, 2, 3}, ["2", "3", "4"], known_course_ids={1, 2, 3, 4})

    assert delta == AssignmentDelta(to_add=frozenset({4}), to_remove=frozenset({1}))


def test_empty_selection_removes_everything():
    delta = reconcile_course_assignments({5}, [])

    assert delta.to_add == frozenset()
    assert delta.to_remove == frozenset({5})


def test_missing_selection_removes_everything():
    delta = reconcile_course_assignments({1045, 4022}, None, known_course_ids={1045, 4022, 1050})

    assert delta.to_remove == frozenset({1045, 4022})
    assert delta.to_add == frozenset()


def test_malformed_entry_rejects_the_whole_selection():
    with pytest.raises(InvalidCourseIdentifierError) as excinfo:
        reconcile_course_assignments({1}, ["2", "x"], known_course_ids={1, 2})

    assert excinfo.value.raw_value == "x"
    assert excinfo.value.status_code == 422


@pytest.mark.parametrize("raw", ["", "4.0", "four", "0x10", "1_0", "\u0661\u0660"])
def test_non_integer_entries_are_invalid(raw):
    with pytest.raises(InvalidCourseIdentifierError):
        course_assignment.parse_course_identifiers(["1045", raw])


def test_digit_lookalikes_never_select_a_course():
    with pytest.raises(InvalidCourseIdentifierError):
        reconcile_course_assignments(set(), ["1_0"], known_course_ids={10})
    with pytest.raises(InvalidCourseIdentifierError):
        reconcile_course_assignments(set(), ["\u0661\u0660"], known_course_ids={10})


def test_duplicate_selections_count_once():
    delta = reconcile_course_assignments(set(), ["4022", "4022", " 4022 "], known_course_ids={4022})

    assert delta.to_add == frozenset({4022})
    assert delta.to_remove == frozenset()


def test_unknown_course_ids_are_never_added():
    delta = reconcile_course_assignments({1}, ["1", "999"], known_course_ids={1, 2})

    assert delta.to_add == frozenset()
    assert delta.to_remove == frozenset()


def test_unchanged_selection_is_an_empty_delta():
    delta = reconcile_course_assignments({2021, 2042}, ["2042", "2021"], known_course_ids={2021, 2042, 1050})

    assert delta.is_empty


def test_result_does_not_depend_on_selection_order():
    known = {1, 2, 3, 4, 5}
    forward = reconcile_course_assignments([3, 1], ["5", "4", "1"], known_course_ids=known)
    backward = reconcile_course_assignments([1, 3], ["1", "4", "5"], known_course_ids=known)

    assert forward == backward


@pytest.mark.parametrize(
    ("current", "selected", "known"),
    [
        ({1, 2, 3}, ["2", "3", "4"], {1, 2, 3, 4}),
        ({5}, [], {5, 6}),
        (set(), ["7", "8"], {7, 8, 9}),
        ({1, 2}, ["3"], {1, 2, 3}),
    ],
)
def test_applied_delta_matches_the_known_selection(current, selected, known):
    delta = reconcile_course_assignments(current, selected, known_course_ids=known)

    assert not (delta.to_add & delta.to_remove)
    expected = {int(item) for item in selected} & known
    assert apply_assignment_delta(current, delta) == expected


def test_assigned_course_data_flags_current_courses():
    courses = [
        SimpleNamespace(id=4022, title="Microeconomics"),
        SimpleNamespace(id=1045, title="Calculus"),
        SimpleNamespace(id=1050, title="Chemistry"),
    ]

    rows = assigned_course_data(courses, [1050, 4022])

    assert rows == [
        {"course_id": 1045, "title": "Calculus", "assigned": False},
        {"course_id": 1050, "title": "Chemistry", "assigned": True},
        {"course_id": 4022, "title": "Microeconomics", "assigned": True},
    ]
