from datetime import date

from pydantic import BaseModel, EmailStr, Field, field_validator


class StudentBase(BaseModel):
    last_name: str = Field(min_length=1, max_length=50)
    first_mid_name: str = Field(min_length=1, max_length=50)
    email_address: EmailStr | None = None
    enrollment_date: date

    @field_validator("last_name", "first_mid_name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if not trimmed:
            raise ValueError("Name cannot be empty")
        return trimmed

    @field_validator("email_address")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().lower()


class StudentCreate(StudentBase):
    pass


class StudentUpdate(BaseModel):
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    first_mid_name: str | None = Field(default=None, min_length=1, max_length=50)
    email_address: EmailStr | None = None
    enrollment_date: date | None = None

    @field_validator("email_address")
    @classmethod
    def normalize_optional_email(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().lower()


class StudentOut(StudentBase):
    id: int
    full_name: str

    model_config = {"from_attributes": True}
