"""Exception types raised across the college directory package."""
from __future__ import annotations

from .taxonomy import CacheErrorType

__all__ = [
    "CacheErrorType",
    "CacheStorageError",
    "CollegeDirError",
    "EntityStoreError",
    "UnknownFilterDimension",
]


class CollegeDirError(Exception):
    """Base class for errors raised by this package."""


class UnknownFilterDimension(CollegeDirError, ValueError):
    def __init__(self, dimension: str):
        super().__init__(f"Unknown filter dimension '{dimension}'")
        self.dimension = dimension


class CacheStorageError(CollegeDirError):
    """Raised by a cache storage backend when a read or write cannot complete."""

    def __init__(self, message: str, error_type: CacheErrorType = CacheErrorType.UNKNOWN):
        super().__init__(message)
        self.error_type = error_type


class EntityStoreError(CollegeDirError):
    """Raised when the entity provider cannot return colleges or courses."""
