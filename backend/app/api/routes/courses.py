from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.api.deps import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.course import Course
from app.models.department import Department
from app.schemas.course import CourseCreate, CourseOut, CourseUpdate
from app.services.persistence import find_course, save_changes

router = APIRouter()


def _ensure_department(db: Session, department_id: int) -> None:
    if db.get(Department, department_id) is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Department {department_id} does not exist",
        )


@router.get("/", response_model=list[CourseOut])
def list_courses(db: Session = Depends(get_db)) -> list[CourseOut]:
    return list(
        db.execute(select(Course).options(selectinload(Course.department)).order_by(Course.id)).scalars()
    )


@router.get("/{course_id}", response_model=CourseOut)
def get_course(course_id: int, db: Session = Depends(get_db)) -> CourseOut:
    course = find_course(db, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    return course


@router.post("/", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate, db: Session = Depends(get_db)) -> CourseOut:
    if find_course(db, payload.id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course number already exists")
    _ensure_department(db, payload.department_id)
    course = Course(**payload.model_dump())
    db.add(course)
    save_changes(db)
    db.refresh(course)
    return course


@router.put("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: int,
    payload: CourseUpdate,
    db: Session = Depends(get_db),
) -> CourseOut:
    course = find_course(db, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)

    # The course number is immutable; only title, credits and department are editable.
    data = payload.model_dump(exclude_unset=True)
    if data.get("department_id") is not None:
        _ensure_department(db, data["department_id"])

    for key, value in data.items():
        if value is None:
            continue
        setattr(course, key, value)
    save_changes(db)
    db.refresh(course)
    return course


@router.delete("/{course_id}")
def delete_course(course_id: int, db: Session = Depends(get_db)) -> dict:
    course = find_course(db, course_id)
    if course is None:
        raise ResourceNotFoundError("Course", course_id)
    db.delete(course)
    save_changes(db)
    return {"success": True}
