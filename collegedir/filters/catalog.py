"""Static stream/course/branch catalog."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

from ..config import DEFAULT_CATALOG_PATH


@dataclass
class CourseCatalog:
    """Courses offered under each stream and the branches of each course."""

    streams: Dict[str, Dict[str, Tuple[str, ...]]] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: Path) -> "CourseCatalog":
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        streams: Dict[str, Dict[str, Tuple[str, ...]]] = {}
        for stream, courses in (data.get("streams") or {}).items():
            streams[str(stream)] = {
                str(course): tuple(str(branch) for branch in (branches or []))
                for course, branches in (courses or {}).items()
            }
        return cls(streams=streams)

    @classmethod
    def default(cls) -> "CourseCatalog":
        return cls.from_yaml(DEFAULT_CATALOG_PATH)

    def courses_for(self, stream: Optional[str]) -> List[str]:
        if not stream:
            return []
        return list(self.streams.get(stream, {}).keys())

    def streams_offering(self, course: str) -> List[str]:
        return [stream for stream, courses in self.streams.items() if course in courses]

    def offers(self, stream: Optional[str], course: Optional[str]) -> bool:
        if not stream or not course:
            return False
        return course in self.streams.get(stream, {})

    def branches_for(self, stream: Optional[str], course: Optional[str]) -> List[str]:
        if not stream or not course:
            return []
        return list(self.streams.get(stream, {}).get(course, ()))

    def branch_enabled(self, stream: Optional[str], course: Optional[str]) -> bool:
        return bool(self.branches_for(stream, course))
