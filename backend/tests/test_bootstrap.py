import pytest
from sqlalchemy import create_engine, inspect, text
from sqlalchemy.pool import StaticPool

from app.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def _memory_engine():
    return create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda engine: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed"):
        bootstrap.ensure_runtime_schema_compatibility(_memory_engine())


def test_bootstrap_creates_every_required_table():
    engine = _memory_engine()
    bootstrap.ensure_runtime_schema_compatibility(engine)

    table_names = set(inspect(engine).get_table_names())
    assert set(bootstrap.REQUIRED_COLUMNS) <= table_names
    engine.dispose()


def test_bootstrap_rejects_a_table_missing_required_columns():
    engine = _memory_engine()
    with engine.begin() as connection:
        connection.execute(
            text(
                "CREATE TABLE teacher_workloads ("
                "id VARCHAR(36) PRIMARY KEY, teacher_id VARCHAR(36), academic_year VARCHAR(9), semester VARCHAR(10))"
            )
        )

    with pytest.raises(RuntimeError, match="Runtime schema compatibility bootstrap failed") as excinfo:
        bootstrap.ensure_runtime_schema_compatibility(engine)

    assert "teacher_workloads.total_assignment_units" in str(excinfo.value.__cause__)
    columns = {item["name"] for item in inspect(engine).get_columns("teacher_workloads")}
    assert "total_assignment_units" not in columns
    engine.dispose()


def test_missing_schema_lists_absent_tables():
    engine = _memory_engine()
    with engine.connect() as connection:
        missing_tables, missing_columns = bootstrap.missing_schema(connection)

    assert missing_tables == sorted(bootstrap.REQUIRED_COLUMNS)
    assert missing_columns == {}
    engine.dispose()
