"""Error taxonomy enums used when logging cache failures."""
from __future__ import annotations

from enum import Enum


class CacheErrorType(str, Enum):
    """Kinds of cache-layer failure; all of them degrade to a cache miss."""

    READ_FAILED = "read_failed"
    WRITE_FAILED = "write_failed"
    SERIALIZE_FAILED = "serialize_failed"
    EVICT_FAILED = "evict_failed"
    UNKNOWN = "unknown"
