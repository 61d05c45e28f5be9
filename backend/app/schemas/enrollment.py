from pydantic import BaseModel, Field

from app.models.enrollment import Grade


class EnrollmentCreate(BaseModel):
    course_id: int = Field(ge=1)
    student_id: int = Field(ge=1)
    grade: Grade | None = None


class EnrollmentUpdate(BaseModel):
    grade: Grade | None = None


class EnrollmentOut(BaseModel):
    id: int
    course_id: int
    student_id: int
    grade: Grade | None = None
    course_title: str | None = None
    student_name: str | None = None

    model_config = {"from_attributes": True}
