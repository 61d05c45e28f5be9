import logging
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.api.deps import get_db
from app.core.exceptions import ConcurrencyConflictError, RecordDeletedError, ResourceNotFoundError
from app.core.row_version import decode_row_version, encode_row_version
from app.models.department import Department
from app.models.person import Person
from app.schemas.conflict import DepartmentConflictOut, FieldConflictOut
from app.schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate
from app.services.concurrency import (
    ConflictReport,
    DepartmentValues,
    Resolution,
    ResolutionStatus,
    compare_department_values,
    resolve_department_edit,
)
from app.services.persistence import (
    UpdateOutcome,
    conditional_delete_department,
    conditional_update_department,
    find_department,
    save_changes,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DELETED_BY_OTHER_MESSAGE = "Unable to save changes. The department was deleted by another user."
EDIT_CONFLICT_MESSAGE = (
    "The record you attempted to edit was modified by another user after you got the original value. "
    "The edit operation was cancelled and the current values in the database have been returned. "
    "If you still want to edit this record, submit it again with the new row_version."
)
DELETE_CONFLICT_MESSAGE = (
    "The record you attempted to delete was modified by another user after you got the original values. "
    "The delete operation was cancelled and the current values in the database have been returned. "
    "If you still want to delete this record, delete it again with the new row_version."
)


def format_currency(value: Decimal) -> str:
    return f"${value:,.2f}"


def _ensure_administrator(db: Session, instructor_id: int | None) -> None:
    if instructor_id is None:
        return
    person = db.get(Person, instructor_id)
    if person is None or not person.is_instructor:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Administrator must be an existing instructor",
        )


def _current_value_message(db: Session, field: str, value) -> str:
    if value is None:
        text = "None"
    elif field == "budget":
        text = format_currency(value)
    elif field == "start_date":
        text = value.isoformat()
    elif field == "instructor_id":
        administrator = db.get(Person, value)
        text = administrator.full_name if administrator is not None else str(value)
    else:
        text = str(value)
    return f"Current value: {text}"


def _raise_for_resolution(
    db: Session,
    resolution: Resolution,
    current: Department | None,
    values: DepartmentValues,
) -> None:
    submitted = values.as_dict()
    if resolution.status == ResolutionStatus.deleted_by_other or current is None:
        details = DepartmentConflictOut(status="deleted_by_other", submitted=submitted)
        raise RecordDeletedError(DELETED_BY_OTHER_MESSAGE, details=details.model_dump(mode="json"))

    report = resolution.report or ConflictReport(
        fields=compare_department_values(values, current),
        row_version=bytes(current.row_version),
    )
    details = DepartmentConflictOut(
        status="conflicting",
        row_version=encode_row_version(report.row_version),
        fields=[
            FieldConflictOut(
                field=item.field,
                client_value=item.client_value,
                current_value=item.current_value,
                message=_current_value_message(db, item.field, item.current_value),
            )
            for item in report.fields
        ],
        current=DepartmentOut.model_validate(current),
        submitted=submitted,
    )
    raise ConcurrencyConflictError(EDIT_CONFLICT_MESSAGE, details=details.model_dump(mode="json"))


@router.get("/", response_model=list[DepartmentOut])
def list_departments(db: Session = Depends(get_db)) -> list[DepartmentOut]:
    return list(
        db.execute(
            select(Department).options(selectinload(Department.administrator)).order_by(Department.id)
        ).scalars()
    )


@router.get("/{department_id}", response_model=DepartmentOut)
def get_department(department_id: int, db: Session = Depends(get_db)) -> DepartmentOut:
    department = find_department(db, department_id)
    if department is None:
        raise ResourceNotFoundError("Department", department_id)
    return department


@router.post("/", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
def create_department(payload: DepartmentCreate, db: Session = Depends(get_db)) -> DepartmentOut:
    _ensure_administrator(db, payload.instructor_id)
    department = Department(**payload.model_dump())
    db.add(department)
    save_changes(db)
    db.refresh(department)
    return department


@router.put("/{department_id}", response_model=DepartmentOut)
def update_department(
    department_id: int,
    payload: DepartmentUpdate,
    db: Session = Depends(get_db),
) -> DepartmentOut:
    values = DepartmentValues(
        name=payload.name,
        budget=payload.budget,
        start_date=payload.start_date,
        instructor_id=payload.instructor_id,
    )
    current = find_department(db, department_id)
    resolution = resolve_department_edit(payload.row_version, values, current)
    if resolution.may_proceed:
        _ensure_administrator(db, values.instructor_id)
        outcome = conditional_update_department(db, department_id, values, payload.row_version)
        if outcome == UpdateOutcome.success:
            save_changes(db)
            updated = find_department(db, department_id)
            if updated is None:
                # Deleted by another request right after this write committed.
                raise ResourceNotFoundError("Department", department_id)
            return updated
        # Lost the race between the read above and the guarded write.
        db.rollback()
        current = find_department(db, department_id)
        resolution = resolve_department_edit(payload.row_version, values, current)

    logger.info("Department %s edit rejected: %s", department_id, resolution.status.value)
    _raise_for_resolution(db, resolution, current, values)


@router.delete("/{department_id}")
def delete_department(
    department_id: int,
    row_version: str = Query(..., description="Base64 token from the last read of the department"),
    db: Session = Depends(get_db),
) -> dict:
    try:
        expected_row_version = decode_row_version(row_version)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    outcome = conditional_delete_department(db, department_id, expected_row_version)
    if outcome == UpdateOutcome.success:
        save_changes(db)
        return {"success": True, "already_deleted": False}

    db.rollback()
    current = find_department(db, department_id)
    if current is None:
        return {"success": True, "already_deleted": True}

    logger.info("Department %s delete rejected: stale row_version", department_id)
    details = DepartmentConflictOut(
        status="conflicting",
        row_version=encode_row_version(bytes(current.row_version)),
        current=DepartmentOut.model_validate(current),
    )
    raise ConcurrencyConflictError(DELETE_CONFLICT_MESSAGE, details=details.model_dump(mode="json"))
