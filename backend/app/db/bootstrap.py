from __future__ import annotations

import logging

from sqlalchemy import LargeBinary, bindparam, inspect, text

import app.models  # noqa: F401
from app.core.row_version import new_row_version
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "departments": {"id", "name", "budget", "start_date", "instructor_id", "row_version"},
    "people": {"id", "kind", "last_name", "first_mid_name", "hire_date", "enrollment_date"},
    "courses": {"id", "title", "credits", "department_id"},
    "course_instructor": {"course_id", "instructor_id"},
    "office_assignments": {"instructor_id", "location"},
    "enrollments": {"id", "course_id", "student_id", "grade"},
}


def _ensure_department_row_version_column() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "departments" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("departments")}
        if "row_version" not in column_names:
            column_type = "BYTEA" if connection.dialect.name == "postgresql" else "BLOB"
            connection.execute(text(f"ALTER TABLE departments ADD COLUMN row_version {column_type}"))

        # Every department needs its own token before edits can be guarded by it.
        missing_ids = list(
            connection.execute(text("SELECT id FROM departments WHERE row_version IS NULL")).scalars()
        )
        if not missing_ids:
            return
        statement = text("UPDATE departments SET row_version = :token WHERE id = :id").bindparams(
            bindparam("token", type_=LargeBinary())
        )
        for department_id in missing_ids:
            connection.execute(statement, {"token": new_row_version(), "id": department_id})
        logger.info("Backfilled row_version for %d department(s)", len(missing_ids))


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_department_row_version_column()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
