from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine

from app.db.base import Base
from app.db.session import engine as default_engine
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "role", "employment_type", "is_overloaded"},
    "subjects": {"id", "code", "has_lab", "lecture_units", "lab_units", "required_hours"},
    "subject_offerings": {"id", "subject_id", "course_ids", "assigned_teachers", "is_active"},
    "schedules": {"id", "course_id", "year_level", "semester", "academic_year", "is_active"},
    "schedule_events": {"id", "schedule_id", "day", "start_time", "end_time", "subject_id", "position"},
    "teacher_workloads": {
        "id",
        "teacher_id",
        "academic_year",
        "semester",
        "total_assignment_units",
        "total_schedule_units",
    },
}


def missing_schema(connection: Connection) -> tuple[list[str], dict[str, list[str]]]:
    """Return ``(missing_tables, missing_columns_by_table)`` against REQUIRED_COLUMNS."""
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
    missing_columns: dict[str, list[str]] = {}
    for table_name, required in REQUIRED_COLUMNS.items():
        if table_name in missing_tables:
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        absent = sorted(required - existing)
        if absent:
            missing_columns[table_name] = absent
    return missing_tables, missing_columns


def _assert_required_columns(engine: Engine) -> None:
    with engine.begin() as connection:
        missing_tables, missing_columns = missing_schema(connection)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flat = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flat)}")


def ensure_runtime_schema_compatibility(engine: Engine | None = None) -> None:
    bind = engine or default_engine
    try:
        # Tables come from the ORM metadata; columns are then checked, never patched.
        Base.metadata.create_all(bind=bind)
        _assert_required_columns(bind)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
    logger.info("Database schema ready on %s", bind.url.render_as_string(hide_password=True))
