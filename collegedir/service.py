"""Directory service composing the entity provider, search, filters and cache."""
from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from .cache import CachePolicy, ResultCache
from .filters import FilterResult, FilterSelection, FilterSynchronizer
from .repository import CollegeRepository
from .search import COURSE_FIELDS, SuggestionRanker
from .search.ranker import MIN_QUERY_LENGTH

logger = logging.getLogger(__name__)


def _suggestion_payload(suggestion) -> Dict[str, Any]:
    entity = suggestion.source_entity
    return {
        "text": suggestion.text,
        "type": suggestion.source_field,
        "score": suggestion.weighted_score,
        "match_type": suggestion.match_type.value,
        "id": entity.get("id"),
    }


class CollegeDirectory:
    """Answer list, suggestion, filter and course queries over cached entity snapshots."""

    def __init__(
        self,
        repository: CollegeRepository,
        *,
        cache: Optional[ResultCache] = None,
        ranker: Optional[SuggestionRanker] = None,
        synchronizer: Optional[FilterSynchronizer] = None,
    ) -> None:
        self._repository = repository
        self._cache = cache or ResultCache(CachePolicy())
        self._ranker = ranker or SuggestionRanker()
        self._course_ranker = SuggestionRanker(fields=COURSE_FIELDS)
        self._synchronizer = synchronizer or FilterSynchronizer()

    @property
    def cache(self) -> ResultCache:
        return self._cache

    # ------------------------------------------------------------------
    # Entity snapshots
    # ------------------------------------------------------------------
    async def colleges(self) -> List[Dict[str, Any]]:
        async def _load() -> List[Dict[str, Any]]:
            return self._repository.list_colleges()

        return await self._cache.cached_call("colleges.all", None, _load, category="colleges")

    async def courses(
        self, college_id: int, *, query: Optional[str] = None
    ) -> Optional[List[Dict[str, Any]]]:
        """Return the courses of *college_id*, or ``None`` when the college is unknown.

        With a *query*, only matching courses are returned, best match first.
        """

        async def _lookup() -> Optional[Dict[str, Any]]:
            return self._repository.get_college(college_id)

        college = await self._cache.cached_call(
            "colleges.by_id", {"college_id": college_id}, _lookup, category="colleges"
        )
        if college is None:
            return None

        async def _load() -> List[Dict[str, Any]]:
            return self._repository.list_courses(college_id)

        courses = await self._cache.cached_call(
            "courses.by_college", {"college_id": college_id}, _load, category="courses"
        )
        if query and len(query.strip()) >= MIN_QUERY_LENGTH:
            return [item.entity for item in self._course_ranker.rank_entities(courses, query.strip())]
        return courses

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    async def search(
        self,
        selection: FilterSelection,
        *,
        query: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        result = await self._filter_result(selection, query)
        entities = result.filtered
        total = len(entities)
        logger.debug("College search matched %d entities for %s", total, selection.as_dict())
        page = max(page, 1)
        limit = max(limit, 1)
        start = (page - 1) * limit
        return {
            "data": entities[start : start + limit],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": max(1, -(-total // limit)),
            },
            "filters": self._options_payload(result),
        }

    async def filters(self, selection: FilterSelection, *, query: Optional[str] = None) -> Dict[str, Any]:
        params = dict(selection.as_dict(), q=query)

        async def _compute() -> Dict[str, Any]:
            return self._options_payload(await self._filter_result(selection, query))

        return await self._cache.cached_call("filters.options", params, _compute, category="filters")

    async def suggestions(self, query: str, *, limit: int = 8) -> List[Dict[str, Any]]:
        # Key and computation see the same text; matching is case-insensitive.
        text = query.strip().lower()
        params = {"q": text, "limit": limit}

        async def _compute() -> List[Dict[str, Any]]:
            colleges = await self.colleges()
            return [_suggestion_payload(item) for item in self._ranker.suggest(colleges, text, limit)]

        return await self._cache.cached_call("search.suggestions", params, _compute, category="search")

    def invalidate(self, category: str, reason: str = "manual") -> Dict[str, Any]:
        record = self._cache.invalidate_type(category, reason)
        return asdict(record)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    async def _filter_result(self, selection: FilterSelection, query: Optional[str]) -> FilterResult:
        colleges = await self.colleges()
        return self._synchronizer.compute_available(colleges, selection, query=query)

    @staticmethod
    def _options_payload(result: FilterResult) -> Dict[str, Any]:
        return {
            "selection": result.selection.as_dict(),
            "options": asdict(result.options),
            "branch_enabled": result.branch_enabled,
            "total": len(result.filtered),
        }
