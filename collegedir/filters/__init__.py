"""Filter selection, classification and option synchronisation."""

from .catalog import CourseCatalog
from .classification import is_actually_government_college, normalize_state, states_equal
from .synchronizer import AvailableOptions, FilterResult, FilterSelection, FilterSynchronizer

__all__ = [
    "AvailableOptions",
    "CourseCatalog",
    "FilterResult",
    "FilterSelection",
    "FilterSynchronizer",
    "is_actually_government_college",
    "normalize_state",
    "states_equal",
]
