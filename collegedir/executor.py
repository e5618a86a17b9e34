"""DuckDB execution utilities."""
from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import duckdb


@dataclass
class QueryResult:
    records: List[Dict[str, object]]
    runtime_ms: float
    rowcount: int


class DuckDBExecutor:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._conn = duckdb.connect(str(self.db_path))

    def query(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
        start = time.perf_counter()
        result = self._conn.execute(sql, list(params or []))
        columns = [desc[0] for desc in result.description]
        rows = result.fetchall()
        records = [dict(zip(columns, row)) for row in rows]
        runtime_ms = (time.perf_counter() - start) * 1000
        return QueryResult(records=records, runtime_ms=runtime_ms, rowcount=len(records))

    def close(self) -> None:
        self._conn.close()
