"""Optimistic concurrency decisions for department edits.

Everything here is a pure function of its inputs. The write that follows a
``no_conflict`` decision must still go through
``app.services.persistence.conditional_update_department``, which re-checks
the version token atomically.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

CONCURRENCY_FIELDS: tuple[str, ...] = ("name", "budget", "start_date", "instructor_id")


class ResolutionStatus(str, Enum):
    no_conflict = "no_conflict"
    conflicting = "conflicting"
    deleted_by_other = "deleted_by_other"


@dataclass(frozen=True)
class DepartmentValues:
    name: str
    budget: Decimal
    start_date: date
    instructor_id: int | None = None

    @classmethod
    def from_record(cls, record: Any) -> "DepartmentValues":
        return cls(
            name=record.name,
            budget=record.budget,
            start_date=record.start_date,
            instructor_id=record.instructor_id,
        )

    def as_dict(self) -> dict[str, Any]:
        return {field: getattr(self, field) for field in CONCURRENCY_FIELDS}


@dataclass(frozen=True)
class FieldConflict:
    field: str
    client_value: Any
    current_value: Any


@dataclass(frozen=True)
class ConflictReport:
    fields: tuple[FieldConflict, ...]
    row_version: bytes

    @property
    def field_names(self) -> list[str]:
        return [item.field for item in self.fields]


@dataclass(frozen=True)
class Resolution:
    status: ResolutionStatus
    report: ConflictReport | None = None

    @property
    def may_proceed(self) -> bool:
        return self.status == ResolutionStatus.no_conflict


def compare_department_values(client_values: DepartmentValues, current: Any) -> tuple[FieldConflict, ...]:
    conflicts: list[FieldConflict] = []
    for field in CONCURRENCY_FIELDS:
        client_value = getattr(client_values, field)
        current_value = getattr(current, field)
        if client_value != current_value:
            conflicts.append(
                FieldConflict(field=field, client_value=client_value, current_value=current_value)
            )
    return tuple(conflicts)


def resolve_department_edit(
    client_row_version: bytes,
    client_values: DepartmentValues,
    current: Any | None,
) -> Resolution:
    """Decide whether a department edit based on ``client_row_version`` may be written.

    ``current`` is the stored department (anything exposing ``row_version`` and
    the fields in ``CONCURRENCY_FIELDS``) or ``None`` when it no longer exists.
    A token mismatch is always a conflict, even when every field already matches.
    """
    if current is None:
        return Resolution(status=ResolutionStatus.deleted_by_other)

    current_row_version = bytes(current.row_version)
    if bytes(client_row_version) == current_row_version:
        return Resolution(status=ResolutionStatus.no_conflict)

    report = ConflictReport(
        fields=compare_department_values(client_values, current),
        row_version=current_row_version,
    )
    return Resolution(status=ResolutionStatus.conflicting, report=report)
