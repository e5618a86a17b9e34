"""Persistent cache tier backed by DuckDB."""
from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Optional, Protocol

import duckdb

from ..errors import CacheErrorType, CacheStorageError
from .entry import CacheEntry


class CacheStorage(Protocol):
    def read(self, key: str) -> Optional[CacheEntry]: ...

    def write(self, entry: CacheEntry) -> None: ...

    def delete(self, key: str) -> None: ...

    def delete_category(self, category: str) -> int: ...

    def evict(self, now: float) -> int: ...

    def clear(self) -> None: ...

    def count(self) -> int: ...


class DuckDBCacheStorage:
    """Store JSON-encoded cache entries in a ``result_cache`` table.

    ``max_entries`` acts as a storage quota: writing a new key while the table
    is full raises :class:`CacheStorageError`, leaving eviction to the caller.
    """

    def __init__(self, db_path: Path, *, max_entries: Optional[int] = None) -> None:
        self._db_path = Path(db_path)
        self._max_entries = max_entries
        self._ensure_tables()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def read(self, key: str) -> Optional[CacheEntry]:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT key, category, payload, created_at, ttl FROM result_cache WHERE key = ?",
                    [key],
                ).fetchone()
        except duckdb.Error as exc:
            raise CacheStorageError(str(exc), CacheErrorType.READ_FAILED) from exc
        if not row:
            return None
        try:
            data = json.loads(row[2])
        except (TypeError, ValueError) as exc:
            raise CacheStorageError(str(exc), CacheErrorType.READ_FAILED) from exc
        return CacheEntry(
            key=str(row[0]),
            data=data,
            created_at=float(row[3]),
            ttl=float(row[4]),
            category=str(row[1]),
        )

    def write(self, entry: CacheEntry) -> None:
        try:
            payload = json.dumps(entry.data, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise CacheStorageError(str(exc), CacheErrorType.SERIALIZE_FAILED) from exc
        try:
            with self._connect() as conn:
                if self._max_entries is not None:
                    exists = conn.execute(
                        "SELECT 1 FROM result_cache WHERE key = ?", [entry.key]
                    ).fetchone()
                    total = conn.execute("SELECT COUNT(*) FROM result_cache").fetchone()[0]
                    if not exists and int(total) >= self._max_entries:
                        raise CacheStorageError(
                            f"cache quota of {self._max_entries} entries exceeded",
                            CacheErrorType.WRITE_FAILED,
                        )
                conn.execute(
                    """
                    INSERT OR REPLACE INTO result_cache (key, category, payload, created_at, ttl)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [entry.key, entry.category, payload, entry.created_at, entry.ttl],
                )
        except duckdb.Error as exc:
            raise CacheStorageError(str(exc), CacheErrorType.WRITE_FAILED) from exc

    def delete(self, key: str) -> None:
        self._execute("DELETE FROM result_cache WHERE key = ?", [key])

    def delete_category(self, category: str) -> int:
        try:
            with self._connect() as conn:
                removed = conn.execute(
                    "SELECT COUNT(*) FROM result_cache WHERE category = ?", [category]
                ).fetchone()[0]
                conn.execute("DELETE FROM result_cache WHERE category = ?", [category])
        except duckdb.Error as exc:
            raise CacheStorageError(str(exc), CacheErrorType.EVICT_FAILED) from exc
        return int(removed)

    def evict(self, now: float) -> int:
        """Drop expired rows, or the oldest half when nothing has expired."""

        try:
            with self._connect() as conn:
                before = int(conn.execute("SELECT COUNT(*) FROM result_cache").fetchone()[0])
                conn.execute("DELETE FROM result_cache WHERE created_at + ttl <= ?", [now])
                after = int(conn.execute("SELECT COUNT(*) FROM result_cache").fetchone()[0])
                if after == before and after > 0:
                    oldest = math.ceil(after / 2)
                    conn.execute(
                        """
                        DELETE FROM result_cache WHERE key IN (
                            SELECT key FROM result_cache ORDER BY created_at, key LIMIT ?
                        )
                        """,
                        [oldest],
                    )
                    after -= oldest
        except duckdb.Error as exc:
            raise CacheStorageError(str(exc), CacheErrorType.EVICT_FAILED) from exc
        return before - after

    def clear(self) -> None:
        self._execute("DELETE FROM result_cache", [])

    def count(self) -> int:
        try:
            with self._connect() as conn:
                row = conn.execute("SELECT COUNT(*) FROM result_cache").fetchone()
        except duckdb.Error as exc:
            raise CacheStorageError(str(exc), CacheErrorType.READ_FAILED) from exc
        return int(row[0]) if row else 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _connect(self) -> duckdb.DuckDBPyConnection:
        return duckdb.connect(str(self._db_path))

    def _execute(self, sql: str, params: list) -> None:
        try:
            with self._connect() as conn:
                conn.execute(sql, params)
        except duckdb.Error as exc:
            raise CacheStorageError(str(exc), CacheErrorType.EVICT_FAILED) from exc

    def _ensure_tables(self) -> None:
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS result_cache (
                    key TEXT PRIMARY KEY,
                    category TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    created_at DOUBLE NOT NULL,
                    ttl DOUBLE NOT NULL
                )
                """
            )
