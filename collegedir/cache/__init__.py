"""Result caching with TTLs, dependent invalidation and request deduplication."""

from .dedup import RequestDeduplicator
from .entry import CacheEntry, CachePolicy, make_key
from .storage import CacheStorage, DuckDBCacheStorage
from .store import InvalidationRecord, ResultCache

__all__ = [
    "CacheEntry",
    "CachePolicy",
    "CacheStorage",
    "DuckDBCacheStorage",
    "InvalidationRecord",
    "RequestDeduplicator",
    "ResultCache",
    "make_key",
]
