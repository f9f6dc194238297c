"""Index-range syntax used to pick items out of an ordered listing.

``"5"`` selects ``[5, 6)``, ``"3..7"`` selects ``[3, 7)``; several ranges are
separated by whitespace and merged when they overlap or touch.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import NamedTuple, TypeVar

from trashbin.errors import SelectionError

T = TypeVar("T")

RANGE_SEPARATOR = ".."


class IndexRange(NamedTuple):
    """Half-open interval ``[start, end)`` of listing indices."""

    start: int
    end: int

    @classmethod
    def between(cls, first: int, second: int) -> IndexRange:
        """Return the interval spanning two bounds given in either order."""
        return cls(min(first, second), max(first, second))

    def touches(self, other: IndexRange) -> bool:
        """Return whether the intervals overlap or are adjacent."""
        return max(self.start, other.start) <= min(self.end, other.end)

    def union(self, other: IndexRange) -> IndexRange:
        """Return the smallest interval covering both (callers check :meth:`touches`)."""
        return IndexRange(min(self.start, other.start), max(self.end, other.end))

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"


class RangeSet:
    """Sorted, non-overlapping collection of :class:`IndexRange` values."""

    def __init__(self, ranges: Iterable[IndexRange] = ()) -> None:
        self._ranges = _merge(ranges)

    @property
    def ranges(self) -> tuple[IndexRange, ...]:
        """Return the merged intervals in ascending order."""
        return self._ranges

    def is_empty(self) -> bool:
        """Return whether no index is selected."""
        return all(item.start == item.end for item in self._ranges)

    def indices(self) -> Iterator[int]:
        """Yield selected indices in ascending order."""
        for item in self._ranges:
            yield from range(item.start, item.end)

    def select(self, items: Sequence[T]) -> list[T]:
        """Return the selected items of ``items``.

        Raises:
            SelectionError: If any selected index is past the end of ``items``.
        """
        end = max((item.end for item in self._ranges if item.start < item.end), default=0)
        if end > len(items):
            raise SelectionError(f"Index {end - 1} is out of range for {len(items)} item(s)")
        return [items[index] for index in self.indices()]

    def __iter__(self) -> Iterator[IndexRange]:
        return iter(self._ranges)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RangeSet):
            return NotImplemented
        return self._ranges == other._ranges

    def __repr__(self) -> str:
        return f"RangeSet({list(self._ranges)!r})"


def parse_range(text: str) -> IndexRange:
    """Parse a single ``N`` or ``A..B`` token.

    Raises:
        SelectionError: For empty text, a missing bound, a non-numeric bound,
            or more than one separator.
    """
    if not text:
        raise SelectionError("Could not parse an empty range")
    parts = text.split(RANGE_SEPARATOR)
    if len(parts) > 2:
        raise SelectionError(f"Unexpected second '{RANGE_SEPARATOR}' in {text!r}")
    start = _parse_bound(parts[0], text)
    if len(parts) == 1:
        return IndexRange(start, start + 1)
    return IndexRange.between(start, _parse_bound(parts[1], text))


def parse_ranges(text: str) -> RangeSet:
    """Parse whitespace-separated range tokens into a merged :class:`RangeSet`.

    Raises:
        SelectionError: If ``text`` is blank or any token is malformed.
    """
    tokens = text.split()
    if not tokens:
        raise SelectionError("Could not parse an empty range expression")
    return RangeSet(parse_range(token) for token in tokens)


def _parse_bound(value: str, token: str) -> int:
    if not value.isdigit() or not value.isascii():
        raise SelectionError(f"Failed to parse {value!r} in {token!r} as a non-negative number")
    return int(value)


def _merge(ranges: Iterable[IndexRange]) -> tuple[IndexRange, ...]:
    merged: list[IndexRange] = []
    for item in sorted(ranges):
        if merged and merged[-1].touches(item):
            merged[-1] = merged[-1].union(item)
        else:
            merged.append(item)
    return tuple(merged)


__all__ = ["IndexRange", "RangeSet", "parse_range", "parse_ranges"]
