from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import PersistenceError
from app.models.course import Course
from app.models.department import Department
from app.models.person import Person, PersonKind
from app.services.concurrency import DepartmentValues

logger = logging.getLogger(__name__)

SAVE_FAILED_MESSAGE = (
    "Unable to save changes. Try again, and if the problem persists, see your system administrator."
)


class UpdateOutcome(str, Enum):
    success = "success"
    version_mismatch = "version_mismatch"


def find_department(db: Session, department_id: int) -> Department | None:
    # populate_existing so a re-read after a lost conditional write sees the other writer's row.
    return db.execute(
        select(Department)
        .where(Department.id == department_id)
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()


def find_instructor_with_courses(db: Session, instructor_id: int) -> Person | None:
    return db.execute(
        select(Person)
        .options(selectinload(Person.courses), selectinload(Person.office_assignment))
        .where(Person.id == instructor_id, Person.kind == PersonKind.instructor)
    ).scalar_one_or_none()


def find_course(db: Session, course_id: int) -> Course | None:
    return db.get(Course, course_id)


def find_courses(db: Session, course_ids: Iterable[int]) -> list[Course]:
    ids = sorted(set(course_ids))
    if not ids:
        return []
    return list(db.execute(select(Course).where(Course.id.in_(ids)).order_by(Course.id)).scalars())


def all_course_ids(db: Session) -> set[int]:
    return set(db.execute(select(Course.id)).scalars())


def conditional_update_department(
    db: Session,
    department_id: int,
    values: DepartmentValues,
    expected_row_version: bytes,
) -> UpdateOutcome:
    """Write ``values`` only if the stored token still equals ``expected_row_version``.

    The check and the write are one UPDATE statement. ``row_version`` is left
    out of the SET clause so the column's ``onupdate`` hook issues a new token.
    """
    result = db.execute(
        update(Department)
        .where(
            Department.id == department_id,
            Department.row_version == expected_row_version,
        )
        .values(**values.as_dict())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        return UpdateOutcome.success
    return UpdateOutcome.version_mismatch


def conditional_delete_department(
    db: Session,
    department_id: int,
    expected_row_version: bytes,
) -> UpdateOutcome:
    result = db.execute(
        delete(Department)
        .where(
            Department.id == department_id,
            Department.row_version == expected_row_version,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        return UpdateOutcome.success
    return UpdateOutcome.version_mismatch


def save_changes(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database commit failed")
        raise PersistenceError(SAVE_FAILED_MESSAGE) from exc
