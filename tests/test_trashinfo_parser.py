"""Tests for the sidecar text format and its on-disk persistence."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from trashbin.errors import TrashIOError
from trashbin.percent_path import PercentPath
from trashbin.trashinfo import (
    BadDateFormatError,
    MissingFieldError,
    MissingHeaderError,
    SidecarExistsError,
    TrashInfo,
    TrashInfoParseError,
    UnexpectedTrailingContentError,
    WrongExtensionError,
    parse_trash_info,
    read_trash_info,
    serialize_trash_info,
    write_trash_info,
)

VALID = "[Trash Info]\nPath=/home/user/a%20b.txt\nDeletionDate=2024-03-05T07:08:09\n"


def test_parse_valid_sidecar() -> None:
    info = parse_trash_info(VALID)

    assert info.percent_path == PercentPath("/home/user/a%20b.txt")
    assert info.original_path() == Path("/home/user/a b.txt")
    assert info.deletion_date == datetime(2024, 3, 5, 7, 8, 9)


def test_parse_accepts_missing_trailing_newline() -> None:
    assert parse_trash_info(VALID.rstrip("\n")) == parse_trash_info(VALID)


def test_serialize_then_parse_round_trips() -> None:
    info = TrashInfo.for_path("/srv/x=y/z", datetime(2023, 12, 31, 23, 59, 58))

    text = serialize_trash_info(info)

    assert text == "[Trash Info]\nPath=/srv/x%3Dy/z\nDeletionDate=2023-12-31T23:59:58"
    assert parse_trash_info(text) == info


def test_deletion_date_drops_microseconds() -> None:
    info = TrashInfo.for_path("/a", datetime(2024, 1, 1, 0, 0, 0, 999_999))

    assert info.deletion_date_text == "2024-01-01T00:00:00"


def test_swapped_fields_report_missing_path() -> None:
    text = "[Trash Info]\nDeletionDate=2024-03-05T07:08:09\nPath=/a\n"

    with pytest.raises(MissingFieldError) as excinfo:
        parse_trash_info(text)

    assert excinfo.value.field == "Path"


@pytest.mark.parametrize(
    ("text", "error", "field"),
    [
        ("", MissingHeaderError, None),
        ("[Trash]\nPath=/a\nDeletionDate=2024-03-05T07:08:09", MissingHeaderError, None),
        ("[Trash Info]", MissingFieldError, "Path"),
        ("[Trash Info]\nPath=\nDeletionDate=2024-03-05T07:08:09", MissingFieldError, "Path"),
        ("[Trash Info]\nPath=/a", MissingFieldError, "DeletionDate"),
        ("[Trash Info]\nPath=/a\nDeleted=2024-03-05T07:08:09", MissingFieldError, "DeletionDate"),
    ],
)
def test_structural_errors(text: str, error: type[Exception], field: str | None) -> None:
    with pytest.raises(error) as excinfo:
        parse_trash_info(text)

    if field is not None:
        assert excinfo.value.field == field  # type: ignore[attr-defined]


@pytest.mark.parametrize(
    "value",
    ["2024-03-05", "2024-03-05 07:08:09", "2024-3-5T07:08:09", "2024-13-05T07:08:09"],
)
def test_bad_dates_are_rejected(value: str) -> None:
    with pytest.raises(BadDateFormatError):
        parse_trash_info(f"[Trash Info]\nPath=/a\nDeletionDate={value}")


def test_trailing_content_is_rejected() -> None:
    with pytest.raises(UnexpectedTrailingContentError):
        parse_trash_info(VALID + "Extra=1\n")


def test_parse_errors_share_a_base_class() -> None:
    with pytest.raises(TrashInfoParseError):
        parse_trash_info("nonsense")


def test_write_then_read(tmp_path: Path) -> None:
    path = tmp_path / "a.txt.trashinfo"
    info = TrashInfo.for_path("/home/user/a.txt", datetime(2024, 1, 2, 3, 4, 5))

    write_trash_info(path, info)

    assert path.read_text(encoding="utf-8").endswith("DeletionDate=2024-01-02T03:04:05\n")
    assert read_trash_info(path) == info


def test_write_refuses_to_overwrite(tmp_path: Path) -> None:
    path = tmp_path / "a.trashinfo"
    path.write_text("taken", encoding="utf-8")

    with pytest.raises(SidecarExistsError):
        write_trash_info(path, TrashInfo.for_path("/a"))

    assert path.read_text(encoding="utf-8") == "taken"


def test_read_requires_extension(tmp_path: Path) -> None:
    path = tmp_path / "a.info"
    path.write_text(VALID, encoding="utf-8")

    with pytest.raises(WrongExtensionError):
        read_trash_info(path)


def test_read_missing_file_raises_io_error(tmp_path: Path) -> None:
    with pytest.raises(TrashIOError):
        read_trash_info(tmp_path / "missing.trashinfo")


def test_read_rejects_non_utf8(tmp_path: Path) -> None:
    path = tmp_path / "bad.trashinfo"
    path.write_bytes(b"[Trash Info]\nPath=/\xff\nDeletionDate=2024-01-01T00:00:00\n")

    with pytest.raises(TrashInfoParseError):
        read_trash_info(path)


def test_records_order_by_deletion_date() -> None:
    older = TrashInfo.for_path("/b", datetime(2020, 1, 1))
    newer = TrashInfo.for_path("/a", datetime(2021, 1, 1))

    assert older < newer
    assert sorted([newer, older]) == [older, newer]
