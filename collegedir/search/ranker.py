"""Weighted multi-field suggestion ranking."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .fuzzy import FuzzyMatcher, MatchType

Entity = Mapping[str, Any]

MIN_QUERY_LENGTH = 2
DEFAULT_MAX_RESULTS = 8

# Older college records use ``location``/``type`` for these fields.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "city": ("city", "location"),
    "college_type": ("college_type", "type"),
}


@dataclass(frozen=True)
class SearchField:
    key: str
    weight: int
    field_type: str


COLLEGE_FIELDS: Tuple[SearchField, ...] = (
    SearchField("name", 10, "college"),
    SearchField("city", 8, "city"),
    SearchField("state", 6, "state"),
    SearchField("college_type", 4, "type"),
    SearchField("management_type", 3, "management"),
)

COURSE_FIELDS: Tuple[SearchField, ...] = (
    SearchField("course_name", 10, "course"),
    SearchField("course_type", 6, "course_type"),
)


@dataclass(frozen=True)
class Suggestion:
    text: str
    source_field: str
    source_entity: Entity
    weighted_score: int
    match_type: MatchType


@dataclass(frozen=True)
class RankedEntity:
    entity: Entity
    weighted_score: int
    source_field: str
    match_type: MatchType


def field_value(entity: Entity, key: str) -> Optional[Any]:
    for candidate in FIELD_ALIASES.get(key, (key,)):
        value = entity.get(candidate)
        if value is not None and value != "":
            return value
    return None


class SuggestionRanker:
    """Score every searchable field of every entity and keep the best suggestions."""

    def __init__(
        self,
        matcher: Optional[FuzzyMatcher] = None,
        *,
        fields: Sequence[SearchField] = COLLEGE_FIELDS,
    ) -> None:
        self._matcher = matcher or FuzzyMatcher()
        self._fields = tuple(fields)

    def suggest(
        self,
        entities: Iterable[Entity],
        query: str,
        max_results: int = DEFAULT_MAX_RESULTS,
    ) -> List[Suggestion]:
        if not query or len(query) < MIN_QUERY_LENGTH:
            return []
        candidates: List[Suggestion] = []
        for entity in entities:
            for field in self._fields:
                value = field_value(entity, field.key)
                if value is None:
                    continue
                text = str(value)
                result = self._matcher.match(query, text)
                if result is None:
                    continue
                candidates.append(
                    Suggestion(
                        text=text,
                        source_field=field.field_type,
                        source_entity=entity,
                        weighted_score=result.score * field.weight,
                        match_type=result.match_type,
                    )
                )

        seen = set()
        unique: List[Suggestion] = []
        for suggestion in candidates:
            key = (suggestion.text, suggestion.source_field)
            if key in seen:
                continue
            seen.add(key)
            unique.append(suggestion)
        # sorted() is stable, so equal scores keep discovery order
        unique = sorted(unique, key=lambda item: item.weighted_score)
        return unique[: max(max_results, 0)]

    def rank_entities(self, entities: Iterable[Entity], query: str) -> List[RankedEntity]:
        """Return the entities that match *query*, best weighted field score first."""

        if not query or len(query) < MIN_QUERY_LENGTH:
            return []
        ranked: List[RankedEntity] = []
        for entity in entities:
            best: Optional[RankedEntity] = None
            for field in self._fields:
                value = field_value(entity, field.key)
                if value is None:
                    continue
                result = self._matcher.match(query, str(value))
                if result is None:
                    continue
                score = result.score * field.weight
                if best is None or score < best.weighted_score:
                    best = RankedEntity(entity, score, field.field_type, result.match_type)
            if best is not None:
                ranked.append(best)
        return sorted(ranked, key=lambda item: item.weighted_score)
