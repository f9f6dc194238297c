"""Predicates for choosing trash entries by original path and deletion time."""

from __future__ import annotations

import fnmatch
import posixpath
import re
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import TypeVar

from trashbin.errors import PercentDecodeError, SelectionError
from trashbin.trashinfo import TrashInfo

T = TypeVar("T")

_UNIT_SECONDS = {
    "s": 1,
    "sec": 1,
    "secs": 1,
    "second": 1,
    "seconds": 1,
    "m": 60,
    "min": 60,
    "mins": 60,
    "minute": 60,
    "minutes": 60,
    "h": 3_600,
    "hr": 3_600,
    "hrs": 3_600,
    "hour": 3_600,
    "hours": 3_600,
    "d": 86_400,
    "day": 86_400,
    "days": 86_400,
    "w": 604_800,
    "week": 604_800,
    "weeks": 604_800,
    "month": 2_592_000,
    "months": 2_592_000,
    "y": 31_536_000,
    "year": 31_536_000,
    "years": 31_536_000,
}
_DURATION_TOKEN = re.compile(r"\s*(\d+)\s*([A-Za-z]+)")


class MatchMode(str, Enum):
    """How a pattern is compared against an original path."""

    REGEX = "regex"
    GLOB = "glob"
    SUBSTRING = "substring"
    EXACT = "exact"


class PatternMatcher:
    """One or more patterns of a single :class:`MatchMode`; any pattern may hit.

    Glob and exact patterns are tried against both the full path and its
    final component.
    """

    def __init__(self, patterns: Sequence[str], mode: MatchMode = MatchMode.REGEX) -> None:
        self._mode = MatchMode(mode)
        self._patterns = tuple(patterns)
        self._regexes: tuple[re.Pattern[str], ...] = ()
        if self._mode is MatchMode.REGEX:
            try:
                self._regexes = tuple(re.compile(pattern) for pattern in self._patterns)
            except re.error as exc:
                raise SelectionError(f"Invalid regular expression {exc.pattern!r}: {exc}") from exc

    @property
    def mode(self) -> MatchMode:
        """Return the match mode."""
        return self._mode

    @property
    def patterns(self) -> tuple[str, ...]:
        """Return the raw patterns."""
        return self._patterns

    def matches(self, path: str) -> bool:
        """Return whether any pattern matches ``path``."""
        name = posixpath.basename(path)
        if self._mode is MatchMode.REGEX:
            return any(regex.search(path) for regex in self._regexes)
        if self._mode is MatchMode.GLOB:
            return any(
                fnmatch.fnmatchcase(path, pattern) or fnmatch.fnmatchcase(name, pattern)
                for pattern in self._patterns
            )
        if self._mode is MatchMode.SUBSTRING:
            return any(pattern in path for pattern in self._patterns)
        return any(pattern in (path, name) for pattern in self._patterns)


class TimeKind(str, Enum):
    """Direction of a deletion-time comparison."""

    BEFORE = "before"
    AFTER = "after"


class TimeFilter:
    """Compare deletion dates against a naive local-time limit."""

    def __init__(self, kind: TimeKind, limit: datetime) -> None:
        self.kind = TimeKind(kind)
        self.limit = limit

    def matches(self, deletion_date: datetime) -> bool:
        if self.kind is TimeKind.BEFORE:
            return deletion_date < self.limit
        return deletion_date > self.limit

    def __repr__(self) -> str:
        return f"TimeFilter({self.kind.value}, {self.limit.isoformat()})"


def parse_duration(text: str) -> timedelta | None:
    """Parse ``"30d"``, ``"2h30m"`` or ``"1 week"``; ``None`` if ``text`` is not a duration."""
    position = 0
    total = 0
    stripped = text.strip()
    while position < len(stripped):
        match = _DURATION_TOKEN.match(stripped, position)
        if match is None:
            return None
        unit = _UNIT_SECONDS.get(match.group(2).lower())
        if unit is None:
            return None
        total += int(match.group(1)) * unit
        position = match.end()
    if position == 0:
        return None
    return timedelta(seconds=total)


def parse_time_spec(text: str, now: datetime | None = None) -> datetime:
    """Resolve a duration or date into a naive local datetime.

    Durations are subtracted from ``now``. Dates may be ``YYYY-MM-DD``
    (midnight), ``YYYY-MM-DD HH:MM:SS`` or any ISO-8601 datetime; aware
    values are converted to local time.

    Raises:
        SelectionError: If ``text`` is neither a duration nor a date.
    """
    reference = now or datetime.now()
    duration = parse_duration(text)
    if duration is not None:
        return reference - duration

    candidate = text.strip()
    for fmt in ("%Y-%m-%d", "%Y-%m-%d %H:%M:%S"):
        try:
            return datetime.strptime(candidate, fmt)
        except ValueError:
            pass
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise SelectionError(f"Invalid duration or date: {text!r}") from exc
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


class EntryFilters:
    """Conjunction of optional predicates over sidecar records.

    Every supplied predicate must match. With no predicates everything
    matches; otherwise records whose path cannot be decoded never match.
    """

    def __init__(
        self,
        patterns: PatternMatcher | None = None,
        times: Sequence[TimeFilter] = (),
        under: Path | None = None,
    ) -> None:
        self.patterns = patterns if patterns is not None and patterns.patterns else None
        self.times = tuple(times)
        self.under = under

    @classmethod
    def build(
        cls,
        *,
        patterns: Sequence[str] = (),
        mode: MatchMode | str = MatchMode.REGEX,
        before: str | None = None,
        within: str | None = None,
        under: Path | None = None,
        now: datetime | None = None,
    ) -> EntryFilters:
        """Build filters from user-facing option values.

        Args:
            patterns: Patterns matched against the original path.
            mode: How patterns are interpreted.
            before: Keep entries deleted before this duration ago or date.
            within: Keep entries deleted after this duration ago or date.
            under: Keep entries originally located at or below this directory.
            now: Reference time for durations.

        Returns:
            EntryFilters: Combined filters.

        Raises:
            SelectionError: If a pattern or time specification is invalid.
        """
        reference = now or datetime.now()
        times: list[TimeFilter] = []
        if before is not None:
            times.append(TimeFilter(TimeKind.BEFORE, parse_time_spec(before, reference)))
        if within is not None:
            times.append(TimeFilter(TimeKind.AFTER, parse_time_spec(within, reference)))
        matcher = PatternMatcher(patterns, MatchMode(mode)) if patterns else None
        return cls(patterns=matcher, times=times, under=under)

    def is_empty(self) -> bool:
        """Return whether no predicate was supplied."""
        return self.patterns is None and not self.times and self.under is None

    def matches(self, info: TrashInfo) -> bool:
        """Return whether ``info`` satisfies every predicate."""
        if self.is_empty():
            return True
        try:
            original = info.original_path()
        except PercentDecodeError:
            return False
        if self.under is not None and original != self.under and self.under not in original.parents:
            return False
        if self.patterns is not None and not self.patterns.matches(str(original)):
            return False
        return all(time_filter.matches(info.deletion_date) for time_filter in self.times)

    def apply(self, listing: Iterable[tuple[T, TrashInfo]]) -> list[tuple[T, TrashInfo]]:
        """Return the pairs of ``listing`` whose record matches, preserving order."""
        return [pair for pair in listing if self.matches(pair[1])]


__all__ = [
    "MatchMode",
    "PatternMatcher",
    "TimeKind",
    "TimeFilter",
    "EntryFilters",
    "parse_duration",
    "parse_time_spec",
]
