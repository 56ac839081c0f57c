from __future__ import annotations

import logging

from sqlalchemy import inspect

import examgrid.models  # noqa: F401
from examgrid.db.base import Base
from examgrid.db.session import engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "faculties": {"id", "name", "duration"},
    "departments": {"id", "name", "faculty_id"},
    "courses": {"id", "code", "title", "level", "department_id"},
    "timetables": {"id", "title", "start_date", "end_date", "is_published"},
    "exam_slots": {"id", "timetable_id", "course_id", "date", "time_slot"},
}


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


def ensure_schema() -> None:
    try:
        Base.metadata.create_all(bind=engine)
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Schema bootstrap failed")
        raise RuntimeError("Schema bootstrap failed") from exc
    logger.info("Schema ready | tables=%s", len(REQUIRED_COLUMNS))
