from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from app.core.row_version import decode_row_version, encode_row_version


class DepartmentBase(BaseModel):
    name: str = Field(min_length=3, max_length=50)
    budget: Decimal = Field(ge=0, max_digits=19, decimal_places=4)
    start_date: date
    instructor_id: int | None = Field(default=None, ge=1)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        trimmed = value.strip()
        if len(trimmed) < 3:
            raise ValueError("Name must be at least 3 characters")
        return trimmed


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentUpdate(DepartmentBase):
    # Base64 token from the last DepartmentOut the client received.
    row_version: bytes

    @field_validator("row_version", mode="before")
    @classmethod
    def decode_token(cls, value):
        if isinstance(value, str):
            return decode_row_version(value)
        return value


class DepartmentOut(DepartmentBase):
    id: int
    administrator_name: str | None = None
    row_version: str

    model_config = {"from_attributes": True}

    @field_validator("row_version", mode="before")
    @classmethod
    def encode_token(cls, value):
        if isinstance(value, (bytes, bytearray, memoryview)):
            return encode_row_version(bytes(value))
        return value
