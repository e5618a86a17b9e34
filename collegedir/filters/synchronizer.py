"""Filter application and dependent option synchronisation."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from ..errors import UnknownFilterDimension
from ..search.ranker import field_value
from .catalog import CourseCatalog
from .classification import (
    college_type,
    is_government_spelling,
    management_label,
    matches_management,
    normalize_state,
    states_equal,
)

Entity = Mapping[str, Any]
Predicate = Callable[[Entity], bool]

DIMENSIONS = ("stream", "state", "management_type", "course", "branch")

# Changing a key clears every listed downstream dimension.
_DOWNSTREAM = {
    "stream": ("course", "branch"),
    "course": ("branch",),
}

_QUERY_FIELDS = ("name", "city", "state")


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class FilterSelection:
    stream: Optional[str] = None
    state: Optional[str] = None
    management_type: Optional[str] = None
    course: Optional[str] = None
    branch: Optional[str] = None

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "FilterSelection":
        values = values or {}
        unknown = [key for key in values if key not in DIMENSIONS]
        if unknown:
            raise UnknownFilterDimension(unknown[0])
        return cls(**{key: _clean(values.get(key)) for key in DIMENSIONS})

    def as_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)

    def with_change(self, dimension: str, value: Any) -> "FilterSelection":
        """Return a copy with *dimension* set and its dependent dimensions cleared."""

        if dimension not in DIMENSIONS:
            raise UnknownFilterDimension(dimension)
        changes: Dict[str, Optional[str]] = {dimension: _clean(value)}
        for downstream in _DOWNSTREAM.get(dimension, ()):
            changes[downstream] = None
        return replace(self, **changes)


@dataclass(frozen=True)
class AvailableOptions:
    streams: List[str] = field(default_factory=list)
    states: List[str] = field(default_factory=list)
    management_types: List[str] = field(default_factory=list)
    courses: List[str] = field(default_factory=list)
    branches: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class FilterResult:
    filtered: List[Entity]
    options: AvailableOptions
    selection: FilterSelection
    branch_enabled: bool


def _total_courses(entity: Entity) -> int:
    raw = entity.get("total_courses")
    try:
        return int(raw) if raw is not None else 0
    except (TypeError, ValueError):
        return 0


def _matches_query(entity: Entity, query: str) -> bool:
    needle = query.lower()
    for key in _QUERY_FIELDS:
        value = field_value(entity, key)
        if value is not None and needle in str(value).lower():
            return True
    return False


class FilterSynchronizer:
    """Narrow an entity list by a selection and recompute each dimension's options.

    Every option list is derived from the entities left after applying all
    *other* active dimensions, so a dimension never hides its own siblings.
    """

    def __init__(self, catalog: Optional[CourseCatalog] = None) -> None:
        self._catalog = catalog or CourseCatalog.default()

    @property
    def catalog(self) -> CourseCatalog:
        return self._catalog

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def normalize(self, selection: FilterSelection) -> FilterSelection:
        """Drop course and branch values the selected stream does not offer."""

        course = selection.course
        branch = selection.branch
        if course and not self._catalog.offers(selection.stream, course):
            course = None
        if branch and branch not in self._catalog.branches_for(selection.stream, course):
            branch = None
        if course == selection.course and branch == selection.branch:
            return selection
        return replace(selection, course=course, branch=branch)

    def compute_available(
        self,
        entities: Iterable[Entity],
        selection: FilterSelection | Mapping[str, Any] | None = None,
        query: Optional[str] = None,
    ) -> FilterResult:
        if not isinstance(selection, FilterSelection):
            selection = FilterSelection.from_mapping(selection)
        selection = self.normalize(selection)
        pool = list(entities)
        query = _clean(query)
        if query:
            pool = [entity for entity in pool if _matches_query(entity, query)]

        predicates = self._predicates(selection)
        filtered = [entity for entity in pool if self._passes(entity, predicates)]

        options = AvailableOptions(
            streams=self._stream_options(self._narrow(pool, predicates, "stream")),
            states=self._state_options(self._narrow(pool, predicates, "state")),
            management_types=self._management_options(
                self._narrow(pool, predicates, "management_type")
            ),
            courses=self._course_options(selection, self._narrow(pool, predicates, "course")),
            branches=self._catalog.branches_for(selection.stream, selection.course),
        )
        return FilterResult(
            filtered=filtered,
            options=options,
            selection=selection,
            branch_enabled=self._catalog.branch_enabled(selection.stream, selection.course),
        )

    def filter(self, entities: Iterable[Entity], selection: FilterSelection) -> List[Entity]:
        return self.compute_available(entities, selection).filtered

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------
    def _predicates(self, selection: FilterSelection) -> Dict[str, Predicate]:
        predicates: Dict[str, Predicate] = {}
        if selection.stream:
            stream = selection.stream
            predicates["stream"] = lambda entity: college_type(entity) == stream
        if selection.course:
            offering = set(self._catalog.streams_offering(selection.course))
            predicates["course"] = (
                lambda entity: college_type(entity) in offering and _total_courses(entity) > 0
            )
        if selection.branch:
            predicates["branch"] = lambda entity: _total_courses(entity) > 0
        if selection.state:
            state = selection.state
            predicates["state"] = lambda entity: states_equal(entity.get("state"), state)
        if selection.management_type:
            management = selection.management_type
            predicates["management_type"] = lambda entity: matches_management(entity, management)
        return predicates

    @staticmethod
    def _passes(entity: Entity, predicates: Mapping[str, Predicate]) -> bool:
        return all(predicate(entity) for predicate in predicates.values())

    def _narrow(
        self, pool: Sequence[Entity], predicates: Mapping[str, Predicate], exclude: str
    ) -> List[Entity]:
        others = {key: value for key, value in predicates.items() if key != exclude}
        return [entity for entity in pool if self._passes(entity, others)]

    # ------------------------------------------------------------------
    # Option lists
    # ------------------------------------------------------------------
    @staticmethod
    def _stream_options(entities: Iterable[Entity]) -> List[str]:
        return sorted({college_type(entity) for entity in entities} - {""})

    @staticmethod
    def _state_options(entities: Iterable[Entity]) -> List[str]:
        return sorted({normalize_state(entity.get("state")) for entity in entities} - {""})

    @staticmethod
    def _management_options(entities: Iterable[Entity]) -> List[str]:
        labels = set()
        for entity in entities:
            label = management_label(entity)
            if label:
                labels.add(label)
            raw = _clean(entity.get("management_type"))
            # Non-government spellings stay selectable even for DNB colleges,
            # matching the raw-equality filter.
            if raw and not is_government_spelling(raw):
                labels.add(raw)
        return sorted(labels)

    def _course_options(self, selection: FilterSelection, entities: Iterable[Entity]) -> List[str]:
        if not selection.stream:
            return []
        present = {college_type(entity) for entity in entities if _total_courses(entity) > 0}
        return [
            course
            for course in self._catalog.courses_for(selection.stream)
            if present.intersection(self._catalog.streams_offering(course))
        ]
