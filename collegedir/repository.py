"""Read-only access to college and course records stored in DuckDB."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import duckdb

from .errors import EntityStoreError
from .executor import DuckDBExecutor

logger = logging.getLogger(__name__)

COLLEGES_TABLE = "colleges"
COURSES_TABLE = "courses"


class CollegeRepository:
    """Return complete snapshots of the college and course tables as plain dicts."""

    def __init__(self, executor: DuckDBExecutor) -> None:
        self._executor = executor

    def list_colleges(self) -> List[Dict[str, Any]]:
        return self._select(f"SELECT * FROM {COLLEGES_TABLE} ORDER BY id", [])

    def get_college(self, college_id: int) -> Optional[Dict[str, Any]]:
        rows = self._select(f"SELECT * FROM {COLLEGES_TABLE} WHERE id = ?", [college_id])
        return rows[0] if rows else None

    def list_courses(self, college_id: int) -> List[Dict[str, Any]]:
        return self._select(
            f"SELECT * FROM {COURSES_TABLE} WHERE college_id = ? ORDER BY course_name, id",
            [college_id],
        )

    def _select(self, sql: str, params: List[Any]) -> List[Dict[str, Any]]:
        try:
            result = self._executor.query(sql, params)
        except duckdb.Error as exc:
            logger.error("Entity query failed: %s", exc)
            raise EntityStoreError(str(exc)) from exc
        logger.debug("Entity query returned %d rows in %.1fms", result.rowcount, result.runtime_ms)
        return result.records
