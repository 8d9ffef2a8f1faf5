"""Admission filtering: wildcard pattern matching and the filter engine."""

from watchpost.filtering.engine import FilterEngine, exception_type_name
from watchpost.filtering.patterns import matches, matches_any

__all__ = [
    "FilterEngine",
    "exception_type_name",
    "matches",
    "matches_any",
]
