"""Tests for entry filters: patterns, time limits, and directory scope."""

from __future__ import annotations

import os
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from trashbin.errors import SelectionError
from trashbin.percent_path import PercentPath
from trashbin.selection import (
    EntryFilters,
    MatchMode,
    PatternMatcher,
    TimeFilter,
    TimeKind,
    parse_duration,
    parse_time_spec,
)
from trashbin.trashinfo import TrashInfo

NOW = datetime(2024, 6, 15, 12, 0, 0)


def _info(path: str, deleted: datetime = NOW) -> TrashInfo:
    return TrashInfo.for_path(path, deleted)


@pytest.mark.parametrize(
    ("mode", "pattern", "expected"),
    [
        (MatchMode.REGEX, r"\.txt$", True),
        (MatchMode.REGEX, r"^/other", False),
        (MatchMode.GLOB, "*.txt", True),
        (MatchMode.GLOB, "/home/*/notes.txt", True),
        (MatchMode.GLOB, "*.md", False),
        (MatchMode.SUBSTRING, "user/no", True),
        (MatchMode.SUBSTRING, "USER", False),
        (MatchMode.EXACT, "notes.txt", True),
        (MatchMode.EXACT, "/home/user/notes.txt", True),
        (MatchMode.EXACT, "notes", False),
    ],
)
def test_pattern_modes(mode: MatchMode, pattern: str, expected: bool) -> None:
    assert PatternMatcher([pattern], mode).matches("/home/user/notes.txt") is expected


def test_any_pattern_may_match() -> None:
    matcher = PatternMatcher(["nope", "notes"], MatchMode.SUBSTRING)

    assert matcher.matches("/home/user/notes.txt")


def test_invalid_regex_is_a_selection_error() -> None:
    with pytest.raises(SelectionError):
        PatternMatcher(["("], MatchMode.REGEX)


def test_time_filter_directions() -> None:
    limit = datetime(2024, 1, 1)

    assert TimeFilter(TimeKind.BEFORE, limit).matches(datetime(2023, 12, 31))
    assert not TimeFilter(TimeKind.BEFORE, limit).matches(datetime(2024, 1, 2))
    assert TimeFilter(TimeKind.AFTER, limit).matches(datetime(2024, 1, 2))


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("30d", timedelta(days=30)),
        ("2h30m", timedelta(hours=2, minutes=30)),
        ("1 week", timedelta(weeks=1)),
        ("45s", timedelta(seconds=45)),
        ("2024-01-01", None),
        ("10 parsecs", None),
        ("", None),
    ],
)
def test_parse_duration(text: str, expected: timedelta | None) -> None:
    assert parse_duration(text) == expected


def test_parse_time_spec_accepts_durations_and_dates() -> None:
    assert parse_time_spec("1d", NOW) == NOW - timedelta(days=1)
    assert parse_time_spec("2024-02-03", NOW) == datetime(2024, 2, 3)
    assert parse_time_spec("2024-02-03 04:05:06", NOW) == datetime(2024, 2, 3, 4, 5, 6)
    assert parse_time_spec("2024-02-03T04:05", NOW) == datetime(2024, 2, 3, 4, 5)


def test_parse_time_spec_rejects_garbage() -> None:
    with pytest.raises(SelectionError):
        parse_time_spec("yesterday-ish", NOW)


def test_empty_filters_match_everything() -> None:
    filters = EntryFilters()

    assert filters.is_empty()
    assert filters.matches(TrashInfo(percent_path=PercentPath("/%FF"), deletion_date=NOW))


def test_filters_combine_with_and() -> None:
    filters = EntryFilters.build(
        patterns=["*.log"],
        mode="glob",
        before="7d",
        under=Path("/var"),
        now=NOW,
    )
    old = NOW - timedelta(days=30)

    assert filters.matches(_info("/var/log/app.log", old))
    assert not filters.matches(_info("/var/log/app.log", NOW))
    assert not filters.matches(_info("/var/log/app.txt", old))
    assert not filters.matches(_info("/srv/log/app.log", old))


def test_within_keeps_recent_entries() -> None:
    filters = EntryFilters.build(within="1h", now=NOW)

    assert filters.matches(_info("/a", NOW - timedelta(minutes=5)))
    assert not filters.matches(_info("/a", NOW - timedelta(hours=2)))


def test_scope_includes_the_directory_itself() -> None:
    filters = EntryFilters(under=Path("/data/project"))

    assert filters.matches(_info("/data/project"))
    assert filters.matches(_info("/data/project/src/x.py"))
    assert not filters.matches(_info("/data/project-old/x.py"))


def test_undecodable_paths_never_match_non_empty_filters() -> None:
    raw = TrashInfo(percent_path=PercentPath.from_path(os.fsdecode(b"/\xff")), deletion_date=NOW)

    assert not EntryFilters.build(patterns=[".*"]).matches(raw)


def test_apply_preserves_order() -> None:
    listing = [("first", _info("/a/1")), ("second", _info("/b/2")), ("third", _info("/a/3"))]

    selected = EntryFilters.build(patterns=["^/a/"]).apply(listing)

    assert [key for key, _ in selected] == ["first", "third"]
