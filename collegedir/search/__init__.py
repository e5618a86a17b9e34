"""Fuzzy matching and suggestion ranking."""

from .fuzzy import FuzzyMatcher, MatchResult, MatchType, levenshtein, match
from .ranker import COLLEGE_FIELDS, COURSE_FIELDS, SearchField, Suggestion, SuggestionRanker

__all__ = [
    "COLLEGE_FIELDS",
    "COURSE_FIELDS",
    "FuzzyMatcher",
    "MatchResult",
    "MatchType",
    "SearchField",
    "Suggestion",
    "SuggestionRanker",
    "levenshtein",
    "match",
]
