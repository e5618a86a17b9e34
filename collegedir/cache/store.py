"""In-memory result cache with an optional persistent tier."""
from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, TypeVar

from ..errors import CacheErrorType, CacheStorageError
from .dedup import DEFAULT_TIMEOUT, RequestDeduplicator
from .entry import CacheEntry, CachePolicy, category_of, make_key
from .storage import CacheStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_HISTORY = 100


@dataclass(frozen=True)
class InvalidationRecord:
    timestamp: float
    category: str
    reason: str
    dependencies: Tuple[str, ...]


class ResultCache:
    """Map ``(operation, parameters)`` keys to previously computed results.

    Cache failures never reach the caller: a storage problem is logged and the
    lookup is treated as a miss, or the write stays memory-only.
    """

    def __init__(
        self,
        policy: Optional[CachePolicy] = None,
        *,
        storage: Optional[CacheStorage] = None,
        clock: Callable[[], float] = time.time,
        max_entries: int = 100,
        dedup_timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._policy = policy or CachePolicy()
        self._storage = storage
        self._clock = clock
        self._max_entries = max(1, max_entries)
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._dedup = RequestDeduplicator(timeout=dedup_timeout)
        self._history: List[InvalidationRecord] = []
        self._hits = 0
        self._misses = 0
        self._storage_failures = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get(self, key: str) -> Optional[Any]:
        now = self._clock()
        entry = self._entries.get(key)
        if entry is not None:
            if not entry.is_expired(now):
                self._hits += 1
                logger.debug("Cache HIT for %s", key)
                return entry.data
            del self._entries[key]

        entry = self._read_storage(key)
        if entry is not None:
            if not entry.is_expired(now):
                self._store_memory(entry)
                self._hits += 1
                logger.debug("Cache HIT (persistent) for %s", key)
                return entry.data
            self._delete_storage(key)

        self._misses += 1
        logger.debug("Cache MISS for %s", key)
        return None

    def set(
        self,
        key: str,
        data: Any,
        ttl: Optional[float] = None,
        *,
        category: Optional[str] = None,
    ) -> None:
        category = category or category_of(key)
        entry = CacheEntry(
            key=key,
            data=data,
            created_at=self._clock(),
            ttl=float(ttl) if ttl is not None else self._policy.ttl_for(category),
            category=category,
        )
        self._store_memory(entry)
        if self._storage is not None:
            self._write_storage(entry)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)
        self._delete_storage(key)

    def invalidate_type(self, category: str, reason: str = "manual") -> InvalidationRecord:
        """Drop every entry of *category* and of the categories that depend on it."""

        dependencies = self._policy.dependents_of(category)
        logger.info("Invalidating cache for type %s (%s)", category, reason)
        for target in (category, *dependencies):
            removed = self._clear_category(target)
            if target != category:
                logger.info("Invalidated dependent cache %s (%d entries)", target, removed)
        record = InvalidationRecord(
            timestamp=self._clock(),
            category=category,
            reason=reason,
            dependencies=tuple(dependencies),
        )
        self._history.insert(0, record)
        del self._history[MAX_HISTORY:]
        return record

    def clear(self) -> None:
        self._entries.clear()
        self._dedup.cancel_all()
        if self._storage is not None:
            try:
                self._storage.clear()
            except CacheStorageError as exc:
                self._log_failure("clear", exc)

    def cleanup_expired(self) -> int:
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    async def deduplicate(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        return await self._dedup.execute(key, factory)

    async def cached_call(
        self,
        operation: str,
        params: Optional[Mapping[str, Any]],
        factory: Callable[[], Awaitable[T]],
        *,
        category: Optional[str] = None,
        ttl: Optional[float] = None,
    ) -> T:
        """Return the cached result for the call, computing and storing it on a miss."""

        key = make_key(operation, params)
        cached = self.get(key)
        if cached is not None:
            return cached

        async def _fetch_and_store() -> T:
            result = await factory()
            self.set(key, result, ttl, category=category)
            return result

        return await self.deduplicate(key, _fetch_and_store)

    def invalidation_history(self) -> List[InvalidationRecord]:
        return list(self._history)

    def stats(self) -> Dict[str, Any]:
        now = self._clock()
        by_category: Dict[str, int] = {}
        expired = 0
        for entry in self._entries.values():
            by_category[entry.category] = by_category.get(entry.category, 0) + 1
            if entry.is_expired(now):
                expired += 1
        return {
            "total_items": len(self._entries),
            "valid_items": len(self._entries) - expired,
            "expired_items": expired,
            "by_category": by_category,
            "hits": self._hits,
            "misses": self._misses,
            "storage_failures": self._storage_failures,
            "pending_requests": self._dedup.pending_count,
            "invalidations": len(self._history),
        }

    # ------------------------------------------------------------------
    # Memory tier
    # ------------------------------------------------------------------
    def _store_memory(self, entry: CacheEntry) -> None:
        if entry.key not in self._entries and len(self._entries) >= self._max_entries:
            self._evict_memory()
        self._entries[entry.key] = entry
        self._entries.move_to_end(entry.key)

    def _evict_memory(self) -> None:
        self.cleanup_expired()
        if len(self._entries) < self._max_entries:
            return
        oldest = sorted(self._entries.values(), key=lambda item: item.created_at)
        for entry in oldest[: max(1, self._max_entries // 2)]:
            del self._entries[entry.key]

    def _clear_category(self, category: str) -> int:
        keys = [key for key, entry in self._entries.items() if entry.category == category]
        for key in keys:
            del self._entries[key]
        removed = len(keys)
        if self._storage is not None:
            try:
                removed += self._storage.delete_category(category)
            except CacheStorageError as exc:
                self._log_failure("invalidate", exc)
        return removed

    # ------------------------------------------------------------------
    # Persistent tier
    # ------------------------------------------------------------------
    def _read_storage(self, key: str) -> Optional[CacheEntry]:
        if self._storage is None:
            return None
        try:
            return self._storage.read(key)
        except CacheStorageError as exc:
            self._log_failure("read", exc)
            return None

    def _delete_storage(self, key: str) -> None:
        if self._storage is None:
            return
        try:
            self._storage.delete(key)
        except CacheStorageError as exc:
            self._log_failure("delete", exc)

    def _write_storage(self, entry: CacheEntry) -> None:
        storage = self._storage
        assert storage is not None
        try:
            storage.write(entry)
            return
        except CacheStorageError as exc:
            if exc.error_type is CacheErrorType.SERIALIZE_FAILED:
                self._log_failure("write", exc)
                return
            logger.warning("Cache write failed for %s, evicting and retrying: %s", entry.key, exc)
        try:
            storage.evict(self._clock())
        except CacheStorageError as exc:
            self._log_failure("evict", exc)
        try:
            storage.write(entry)
        except CacheStorageError as exc:
            self._log_failure("write", exc)

    def _log_failure(self, action: str, exc: CacheStorageError) -> None:
        self._storage_failures += 1
        logger.warning(
            "Cache %s failed (%s), continuing without cache: %s",
            action,
            exc.error_type.value,
            exc,
        )
