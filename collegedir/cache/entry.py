"""Cache entries, key derivation and per-category policy."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

MINUTE = 60.0
HOUR = 60 * MINUTE

DEFAULT_TTL = 5 * MINUTE


@dataclass(frozen=True)
class CacheEntry:
    key: str
    data: Any
    created_at: float
    ttl: float
    category: str

    def is_expired(self, now: float) -> bool:
        return now - self.created_at >= self.ttl


def make_key(operation: str, params: Optional[Mapping[str, Any]] = None) -> str:
    """Build ``operation:k1=v1&k2=v2`` with keys sorted so parameter order is irrelevant."""

    params = params or {}
    pairs = [f"{name}={params[name]}" for name in sorted(params) if params[name] is not None]
    return f"{operation}:{'&'.join(pairs)}"


def category_of(key: str) -> str:
    """Return the category encoded in a key built by :func:`make_key`."""

    operation = key.split(":", 1)[0]
    return operation.split(".", 1)[0]


@dataclass(frozen=True)
class CachePolicy:
    """TTL per data category and which categories go stale alongside each other."""

    ttls: Dict[str, float] = field(
        default_factory=lambda: {
            "colleges": 1 * HOUR,
            "courses": 30 * MINUTE,
            "filters": 30 * MINUTE,
            "search": 2 * HOUR,
            # cutoffs and static are reserved for reference data with no producer yet
            "cutoffs": 24 * HOUR,
            "static": 24 * HOUR,
        }
    )
    dependencies: Dict[str, Tuple[str, ...]] = field(
        default_factory=lambda: {
            "colleges": ("search", "filters"),
            "courses": ("search",),
            "filters": ("colleges",),
            "search": ("colleges", "courses"),
        }
    )
    default_ttl: float = DEFAULT_TTL

    def ttl_for(self, category: str) -> float:
        return self.ttls.get(category, self.default_ttl)

    def dependents_of(self, category: str) -> Tuple[str, ...]:
        return self.dependencies.get(category, ())
