from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from app.core.exceptions import InvalidCourseIdentifierError

# ASCII digits only; int() alone also accepts "1_0" and non-ASCII numerals.
COURSE_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class AssignmentDelta:
    to_add: frozenset[int]
    to_remove: frozenset[int]

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def parse_course_identifiers(selected_raw: Sequence[str]) -> frozenset[int]:
    parsed: set[int] = set()
    for raw in selected_raw:
        if isinstance(raw, bool) or not isinstance(raw, (str, int)):
            raise InvalidCourseIdentifierError(raw)
        if isinstance(raw, int):
            parsed.add(raw)
            continue
        text = raw.strip()
        if not COURSE_ID_PATTERN.fullmatch(text):
            raise InvalidCourseIdentifierError(raw)
        parsed.add(int(text))
    return frozenset(parsed)


def reconcile_course_assignments(
    current_course_ids: Iterable[int],
    selected_raw: Sequence[str] | None,
    known_course_ids: Iterable[int] | None = None,
) -> AssignmentDelta:
    """Work out which course links to add and remove for an instructor.

    An empty or missing selection means every course was deselected. Otherwise
    the selection is parsed up front, so one malformed entry rejects the whole
    request. Identifiers outside ``known_course_ids`` are ignored; without a
    known set the universe is the current courses plus the selection.
    """
    current = frozenset(current_course_ids)
    if not selected_raw:
        return AssignmentDelta(to_add=frozenset(), to_remove=current)

    selected = parse_course_identifiers(selected_raw)
    universe = frozenset(known_course_ids) if known_course_ids is not None else current | selected

    return AssignmentDelta(
        to_add=(selected & universe) - current,
        to_remove=(current & universe) - selected,
    )


def apply_assignment_delta(current_course_ids: Iterable[int], delta: AssignmentDelta) -> frozenset[int]:
    return (frozenset(current_course_ids) - delta.to_remove) | delta.to_add


def assigned_course_data(courses: Iterable[Any], assigned_course_ids: Iterable[int]) -> list[dict]:
    assigned = set(assigned_course_ids)
    return [
        {"course_id": course.id, "title": course.title, "assigned": course.id in assigned}
        for course in sorted(courses, key=lambda item: item.id)
    ]
