"""Selection helpers: index ranges and entry filters."""

from .filters import (
    EntryFilters,
    MatchMode,
    PatternMatcher,
    TimeFilter,
    TimeKind,
    parse_duration,
    parse_time_spec,
)
from .ranges import IndexRange, RangeSet, parse_range, parse_ranges

__all__ = [
    "EntryFilters",
    "MatchMode",
    "PatternMatcher",
    "TimeFilter",
    "TimeKind",
    "parse_duration",
    "parse_time_spec",
    "IndexRange",
    "RangeSet",
    "parse_range",
    "parse_ranges",
]
