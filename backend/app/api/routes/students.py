from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.person import Person, PersonKind
from app.schemas.student import StudentCreate, StudentOut, StudentUpdate
from app.services.persistence import save_changes

router = APIRouter()


def _get_student_or_404(db: Session, student_id: int) -> Person:
    student = db.get(Person, student_id)
    if student is None or not student.is_student:
        raise ResourceNotFoundError("Student", student_id)
    return student


@router.get("/", response_model=list[StudentOut])
def list_students(db: Session = Depends(get_db)) -> list[StudentOut]:
    students = (
        db.execute(
            select(Person)
            .where(Person.kind == PersonKind.student)
            .order_by(Person.last_name.asc(), Person.first_mid_name.asc())
        )
        .scalars()
        .all()
    )
    return list(students)


@router.get("/{student_id}", response_model=StudentOut)
def get_student(student_id: int, db: Session = Depends(get_db)) -> StudentOut:
    return _get_student_or_404(db, student_id)


@router.post("/", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentCreate, db: Session = Depends(get_db)) -> StudentOut:
    student = Person(kind=PersonKind.student, **payload.model_dump())
    db.add(student)
    save_changes(db)
    db.refresh(student)
    return student


@router.put("/{student_id}", response_model=StudentOut)
def update_student(
    student_id: int,
    payload: StudentUpdate,
    db: Session = Depends(get_db),
) -> StudentOut:
    student = _get_student_or_404(db, student_id)
    data = payload.model_dump(exclude_unset=True)
    for key, value in data.items():
        if value is None and key != "email_address":
            continue
        setattr(student, key, value)
    save_changes(db)
    db.refresh(student)
    return student


@router.delete("/{student_id}")
def delete_student(student_id: int, db: Session = Depends(get_db)) -> dict:
    student = _get_student_or_404(db, student_id)
    db.delete(student)
    save_changes(db)
    return {"success": True}
