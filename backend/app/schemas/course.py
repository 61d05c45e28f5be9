from pydantic import BaseModel, Field, field_validator


class CourseBase(BaseModel):
    title: str = Field(min_length=3, max_length=50)
    credits: int = Field(ge=0, le=5)
    department_id: int = Field(ge=1)

    @field_validator("title")
    @classmethod
    def normalize_title(cls, value: str) -> str:
        trimmed = value.strip()
        if len(trimmed) < 3:
            raise ValueError("Title must be at least 3 characters")
        return trimmed


class CourseCreate(CourseBase):
    id: int = Field(ge=1, description="Course number")


class CourseUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=3, max_length=50)
    credits: int | None = Field(default=None, ge=0, le=5)
    department_id: int | None = Field(default=None, ge=1)

    @field_validator("title")
    @classmethod
    def normalize_optional_title(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = value.strip()
        if len(trimmed) < 3:
            raise ValueError("Title must be at least 3 characters")
        return trimmed


class CourseOut(CourseBase):
    id: int
    department_name: str | None = None

    model_config = {"from_attributes": True}
