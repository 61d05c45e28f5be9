import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import MultipleResultsFound
from sqlalchemy.orm import Session, selectinload

from app.api.deps import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.course import Course
from app.models.department import Department
from app.models.enrollment import Enrollment
from app.models.office_assignment import OfficeAssignment
from app.models.person import Person, PersonKind
from app.schemas.enrollment import EnrollmentOut
from app.schemas.instructor import AssignedCourseDataOut, InstructorCreate, InstructorOut, InstructorUpdate
from app.services.course_assignment import (
    AssignmentDelta,
    assigned_course_data,
    reconcile_course_assignments,
)
from app.services.persistence import all_course_ids, find_courses, find_instructor_with_courses, save_changes

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_instructor_or_404(db: Session, instructor_id: int) -> Person:
    instructor = find_instructor_with_courses(db, instructor_id)
    if instructor is None:
        raise ResourceNotFoundError("Instructor", instructor_id)
    return instructor


def _course_delta(db: Session, instructor: Person, selected_courses: list[str] | None) -> AssignmentDelta:
    return reconcile_course_assignments(
        {course.id for course in instructor.courses},
        selected_courses,
        known_course_ids=all_course_ids(db),
    )


def _apply_course_delta(db: Session, instructor: Person, delta: AssignmentDelta) -> None:
    if delta.to_remove:
        instructor.courses = [course for course in instructor.courses if course.id not in delta.to_remove]
    if delta.to_add:
        instructor.courses.extend(find_courses(db, delta.to_add))


def _apply_office_location(instructor: Person, location: str | None) -> None:
    if location is None:
        instructor.office_assignment = None
    elif instructor.office_assignment is None:
        instructor.office_assignment = OfficeAssignment(location=location)
    else:
        instructor.office_assignment.location = location


@router.get("/", response_model=list[InstructorOut])
def list_instructors(db: Session = Depends(get_db)) -> list[InstructorOut]:
    return list(
        db.execute(
            select(Person)
            .options(selectinload(Person.courses), selectinload(Person.office_assignment))
            .where(Person.kind == PersonKind.instructor)
            .order_by(Person.last_name, Person.first_mid_name)
        ).scalars()
    )


@router.get("/{instructor_id}", response_model=InstructorOut)
def get_instructor(instructor_id: int, db: Session = Depends(get_db)) -> InstructorOut:
    return _get_instructor_or_404(db, instructor_id)


@router.get("/{instructor_id}/course-assignments", response_model=list[AssignedCourseDataOut])
def get_course_assignments(instructor_id: int, db: Session = Depends(get_db)) -> list[AssignedCourseDataOut]:
    instructor = _get_instructor_or_404(db, instructor_id)
    courses = db.execute(select(Course).order_by(Course.id)).scalars()
    return assigned_course_data(courses, instructor.course_ids)


@router.get("/{instructor_id}/courses/{course_id}/enrollments", response_model=list[EnrollmentOut])
def list_course_enrollments(
    instructor_id: int,
    course_id: int,
    db: Session = Depends(get_db),
) -> list[EnrollmentOut]:
    instructor = _get_instructor_or_404(db, instructor_id)
    if course_id not in instructor.course_ids:
        raise ResourceNotFoundError("Course", course_id)
    return list(
        db.execute(
            select(Enrollment)
            .options(selectinload(Enrollment.student), selectinload(Enrollment.course))
            .where(Enrollment.course_id == course_id)
            .order_by(Enrollment.id)
        ).scalars()
    )


@router.post("/", response_model=InstructorOut, status_code=status.HTTP_201_CREATED)
def create_instructor(payload: InstructorCreate, db: Session = Depends(get_db)) -> InstructorOut:
    instructor = Person(
        kind=PersonKind.instructor,
        last_name=payload.last_name,
        first_mid_name=payload.first_mid_name,
        hire_date=payload.hire_date,
        courses=[],
    )
    delta = _course_delta(db, instructor, payload.selected_courses)
    _apply_office_location(instructor, payload.office_location)
    _apply_course_delta(db, instructor, delta)
    db.add(instructor)
    save_changes(db)
    return _get_instructor_or_404(db, instructor.id)


@router.put("/{instructor_id}", response_model=InstructorOut)
def update_instructor(
    instructor_id: int,
    payload: InstructorUpdate,
    db: Session = Depends(get_db),
) -> InstructorOut:
    instructor = _get_instructor_or_404(db, instructor_id)
    # Reconcile before touching the instructor so a bad selection leaves nothing half-applied.
    delta = _course_delta(db, instructor, payload.selected_courses)

    instructor.last_name = payload.last_name
    instructor.first_mid_name = payload.first_mid_name
    instructor.hire_date = payload.hire_date
    _apply_office_location(instructor, payload.office_location)
    _apply_course_delta(db, instructor, delta)
    save_changes(db)
    logger.debug(
        "Instructor %s courses reconciled: added=%s removed=%s",
        instructor_id,
        sorted(delta.to_add),
        sorted(delta.to_remove),
    )
    return _get_instructor_or_404(db, instructor_id)


@router.delete("/{instructor_id}")
def delete_instructor(instructor_id: int, db: Session = Depends(get_db)) -> dict:
    instructor = _get_instructor_or_404(db, instructor_id)
    try:
        department = db.execute(
            select(Department).where(Department.instructor_id == instructor_id)
        ).scalar_one_or_none()
    except MultipleResultsFound as exc:
        # TODO: decide how to reassign administrators of several departments; refuse until then.
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Instructor administers more than one department; reassign them before deleting",
        ) from exc

    cleared_department_id = None
    if department is not None:
        department.instructor_id = None
        cleared_department_id = department.id
        db.flush()

    db.delete(instructor)
    save_changes(db)
    return {"success": True, "cleared_department_id": cleared_department_id}
