"""Derived classifications over raw college records."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from ..search.ranker import field_value

DNB = "DNB"
GOVERNMENT = "Government"

_STATE_ALIASES = {
    "JAMMU AND KASHMIR": "JAMMU & KASHMIR",
}

_NON_GOVERNMENT_NAME_MARKERS = (
    "private",
    "trust",
    "society",
    "deemed",
    "charitable",
    "mission",
    "foundation",
    "institute",
    "academy",
)
_GOVERNMENT_NAME_MARKERS = ("government", "govt", "state", "central", "national", "all india")
_GOVERNMENT_MANAGEMENT = {"government", "govt", "govt."}


def normalize_state(value: Optional[str]) -> str:
    """Return the display label for *value*, folding separator variants together."""

    if value is None:
        return ""
    state = str(value).strip()
    return _STATE_ALIASES.get(state, state)


def states_equal(left: Optional[str], right: Optional[str]) -> bool:
    if not left or not right:
        return False
    return normalize_state(left) == normalize_state(right)


def college_type(entity: Mapping[str, Any]) -> str:
    value = field_value(entity, "college_type")
    return str(value).strip() if value is not None else ""


def is_dnb(entity: Mapping[str, Any]) -> bool:
    return college_type(entity) == DNB


def is_actually_government_college(entity: Mapping[str, Any]) -> bool:
    """Guess whether a college is government-run from its name and management type.

    This is a text heuristic, not an authoritative classification.  A public
    college whose name contains "institute" is reported as non-government.
    """

    name = str(entity.get("name") or "").lower()
    management = str(entity.get("management_type") or "").strip().lower()

    if any(marker in name for marker in _NON_GOVERNMENT_NAME_MARKERS):
        return False
    if any(marker in name for marker in _GOVERNMENT_NAME_MARKERS):
        return True
    return management in _GOVERNMENT_MANAGEMENT


def is_government_spelling(value: Optional[str]) -> bool:
    return bool(value) and str(value).strip().lower() in _GOVERNMENT_MANAGEMENT


def management_label(entity: Mapping[str, Any]) -> Optional[str]:
    """Return the management filter value this college is listed under."""

    if is_dnb(entity):
        return DNB
    if is_actually_government_college(entity):
        return GOVERNMENT
    raw = str(entity.get("management_type") or "").strip()
    # A government spelling the heuristic rejected is not listed at all.
    if not raw or is_government_spelling(raw):
        return None
    return raw


def matches_management(entity: Mapping[str, Any], value: str) -> bool:
    if value == GOVERNMENT or is_government_spelling(value):
        if is_dnb(entity):
            return False
        return is_actually_government_college(entity)
    if value == DNB:
        return is_dnb(entity)
    raw = entity.get("management_type")
    return raw is not None and str(raw).strip() == value
