from typing import Any, Literal

from pydantic import BaseModel

from app.schemas.department import DepartmentOut


class FieldConflictOut(BaseModel):
    field: Literal["name", "budget", "start_date", "instructor_id"]
    client_value: Any
    current_value: Any
    message: str


class DepartmentConflictOut(BaseModel):
    status: Literal["conflicting", "deleted_by_other"]
    row_version: str | None = None
    fields: list[FieldConflictOut] = []
    current: DepartmentOut | None = None
    submitted: dict[str, Any] = {}
