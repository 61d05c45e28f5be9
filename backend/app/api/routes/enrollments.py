from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.api.deps import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.course import Course
from app.models.enrollment import Enrollment
from app.models.person import Person
from app.schemas.enrollment import EnrollmentCreate, EnrollmentOut, EnrollmentUpdate
from app.services.persistence import save_changes

router = APIRouter()


def _get_enrollment_or_404(db: Session, enrollment_id: int) -> Enrollment:
    enrollment = db.get(Enrollment, enrollment_id)
    if enrollment is None:
        raise ResourceNotFoundError("Enrollment", enrollment_id)
    return enrollment


@router.get("/", response_model=list[EnrollmentOut])
def list_enrollments(
    course_id: int | None = Query(default=None),
    student_id: int | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[EnrollmentOut]:
    query = select(Enrollment).options(selectinload(Enrollment.course), selectinload(Enrollment.student))
    if course_id is not None:
        query = query.where(Enrollment.course_id == course_id)
    if student_id is not None:
        query = query.where(Enrollment.student_id == student_id)
    return list(db.execute(query.order_by(Enrollment.id)).scalars())


@router.get("/{enrollment_id}", response_model=EnrollmentOut)
def get_enrollment(enrollment_id: int, db: Session = Depends(get_db)) -> EnrollmentOut:
    return _get_enrollment_or_404(db, enrollment_id)


@router.post("/", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
def create_enrollment(payload: EnrollmentCreate, db: Session = Depends(get_db)) -> EnrollmentOut:
    if db.get(Course, payload.course_id) is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Course {payload.course_id} does not exist",
        )
    student = db.get(Person, payload.student_id)
    if student is None or not student.is_student:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Student {payload.student_id} does not exist",
        )
    enrollment = Enrollment(**payload.model_dump())
    db.add(enrollment)
    save_changes(db)
    db.refresh(enrollment)
    return enrollment


@router.put("/{enrollment_id}", response_model=EnrollmentOut)
def update_enrollment(
    enrollment_id: int,
    payload: EnrollmentUpdate,
    db: Session = Depends(get_db),
) -> EnrollmentOut:
    enrollment = _get_enrollment_or_404(db, enrollment_id)
    enrollment.grade = payload.grade
    save_changes(db)
    db.refresh(enrollment)
    return enrollment


@router.delete("/{enrollment_id}")
def delete_enrollment(enrollment_id: int, db: Session = Depends(get_db)) -> dict:
    enrollment = _get_enrollment_or_404(db, enrollment_id)
    db.delete(enrollment)
    save_changes(db)
    return {"success": True}
