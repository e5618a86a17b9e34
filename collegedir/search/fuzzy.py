"""Field-level fuzzy string matching."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

DEFAULT_THRESHOLD = 3

_WHITESPACE = re.compile(r"\s+")


class MatchType(str, Enum):
    EXACT = "exact"
    WORD_START = "word-start"
    CONTAINS = "contains"
    FUZZY = "fuzzy"
    ACRONYM = "acronym"


@dataclass(frozen=True)
class MatchResult:
    """Outcome of matching one query against one field; lower scores are better."""

    score: int
    match_type: MatchType


def levenshtein(a: str, b: str) -> int:
    """Return the edit distance between *a* and *b* with unit costs."""

    rows = len(b) + 1
    cols = len(a) + 1
    matrix = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        matrix[i][0] = i
    for j in range(cols):
        matrix[0][j] = j
    for i in range(1, rows):
        for j in range(1, cols):
            if b[i - 1] == a[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = min(
                    matrix[i - 1][j - 1] + 1,
                    matrix[i][j - 1] + 1,
                    matrix[i - 1][j] + 1,
                )
    return matrix[rows - 1][cols - 1]


def _words(text: str) -> List[str]:
    return [word for word in _WHITESPACE.split(text) if word]


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _fuzzy_distance(query: str, text: str, words: List[str], threshold: int) -> Optional[int]:
    distance = levenshtein(query, text)
    if distance <= threshold:
        return distance
    # Multi-word fields fall back to the closest single word.
    if len(words) > 1:
        best = min(levenshtein(query, word) for word in words)
        if best <= threshold:
            return best
    return None


def match(query: object, text: object, threshold: int = DEFAULT_THRESHOLD) -> Optional[MatchResult]:
    """Match *query* against *text*, returning the first rule that applies.

    Rules are tried in order: substring, word prefix, edit distance within
    *threshold*, then word initials.  Comparison is case-insensitive.  Returns
    ``None`` when either side is empty or nothing matches.
    """

    query_lower = _as_text(query).lower()
    text_lower = _as_text(text).lower()
    if not query_lower or not text_lower:
        return None

    if query_lower in text_lower:
        return MatchResult(0, MatchType.EXACT)

    words = _words(text_lower)
    # A word prefix is also a substring, so in practice the rule above wins.
    if any(word.startswith(query_lower) for word in words):
        return MatchResult(1, MatchType.WORD_START)

    # Unreachable: the substring rule above already returned.  Kept so the
    # rule table stays complete; it is unclear what check was meant here.
    if query_lower in text_lower:
        return MatchResult(2, MatchType.CONTAINS)

    distance = _fuzzy_distance(query_lower, text_lower, words, threshold)
    if distance is not None:
        return MatchResult(3 + distance, MatchType.FUZZY)

    acronym = "".join(word[0] for word in words)
    if query_lower in acronym:
        return MatchResult(4, MatchType.ACRONYM)

    return None


@dataclass
class FuzzyMatcher:
    """Callable wrapper around :func:`match` with a fixed edit-distance threshold."""

    threshold: int = DEFAULT_THRESHOLD

    def match(self, query: object, text: object) -> Optional[MatchResult]:
        return match(query, text, self.threshold)
