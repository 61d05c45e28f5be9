from datetime import date

from pydantic import BaseModel, Field, field_validator


class InstructorBase(BaseModel):
    last_name: str = Field(min_length=1, max_length=50)
    first_mid_name: str = Field(min_length=1, max_length=50)
    hire_date: date
    office_location: str | None = Field(default=None, max_length=50)

    @field_validator("last_name", "first_mid_name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Name cannot be empty")
        return trimmed

    @field_validator("office_location")
    @classmethod
    def normalize_office_location(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        return trimmed or None


class InstructorCreate(InstructorBase):
    # Raw form values; parsed by the course assignment reconciler.
    selected_courses: list[str] | None = None


class InstructorUpdate(InstructorBase):
    selected_courses: list[str] | None = None


class InstructorOut(InstructorBase):
    id: int
    full_name: str
    course_ids: list[int] = []

    model_config = {"from_attributes": True}


class AssignedCourseDataOut(BaseModel):
    course_id: int
    title: str
    assigned: bool
