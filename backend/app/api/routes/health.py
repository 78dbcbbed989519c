from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.db.bootstrap import missing_schema
from app.db.session import engine

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": _now()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    """Report whether the database answers and carries every table the engine reads."""
    database = {"ok": True, "schema_ok": False, "missing_tables": [], "missing_columns": {}, "error": None}
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
            missing_tables, missing_columns = missing_schema(connection)
    except SQLAlchemyError as exc:  # pragma: no cover - environment dependent
        database["ok"] = False
        database["error"] = str(exc)
    else:
        database["missing_tables"] = missing_tables
        database["missing_columns"] = missing_columns
        database["schema_ok"] = not missing_tables and not missing_columns

    ready = database["ok"] and database["schema_ok"]
    settings = get_settings()
    payload = {
        "status": "ok" if ready else "degraded",
        "timestamp": _now(),
        "term": {"academic_year": settings.default_academic_year, "semester": settings.default_semester},
        "database": database,
    }
    return JSONResponse(status_code=200 if ready else 503, content=payload)
