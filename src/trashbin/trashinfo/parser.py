"""Parser and serializer for the three-line sidecar grammar.

The grammar is fixed::

    [Trash Info]
    Path=<percent-encoded path>
    DeletionDate=YYYY-MM-DDTHH:MM:SS

Field order is part of the grammar; a ``DeletionDate`` line before ``Path``
is reported as a missing ``Path`` field.
"""

from __future__ import annotations

import re
from datetime import datetime

from trashbin.percent_path import PercentPath

from .errors import (
    BadDateFormatError,
    MissingFieldError,
    MissingHeaderError,
    UnexpectedTrailingContentError,
)
from .models import TrashInfo

HEADER = "[Trash Info]"
PATH_FIELD = "Path"
DELETION_DATE_FIELD = "DeletionDate"

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")


def parse_trash_info(text: str) -> TrashInfo:
    """Parse sidecar text into a record.

    A single trailing newline is tolerated.

    Args:
        text: Full sidecar contents.

    Returns:
        TrashInfo: Parsed record.

    Raises:
        MissingHeaderError: If the first line is not the header.
        MissingFieldError: If ``Path`` or ``DeletionDate`` is absent from its line.
        BadDateFormatError: If the deletion date is malformed.
        UnexpectedTrailingContentError: If extra lines follow the date.
    """
    if text.endswith("\n"):
        text = text[:-1]
    lines = text.split("\n")

    if lines[0] != HEADER:
        raise MissingHeaderError(lines[0] if text else None)

    raw_path = _field_value(lines, 1, PATH_FIELD)
    if not raw_path:
        raise MissingFieldError(PATH_FIELD, lines[1])
    raw_date = _field_value(lines, 2, DELETION_DATE_FIELD)

    if len(lines) > 3:
        raise UnexpectedTrailingContentError(lines[3])

    return TrashInfo(
        percent_path=PercentPath(raw_path),
        deletion_date=_parse_deletion_date(raw_date),
    )


def serialize_trash_info(record: TrashInfo) -> str:
    """Render a record as sidecar text, without a trailing newline."""
    return "\n".join(
        (
            HEADER,
            f"{PATH_FIELD}={record.percent_path.encoded}",
            f"{DELETION_DATE_FIELD}={record.deletion_date_text}",
        )
    )


def _field_value(lines: list[str], index: int, field: str) -> str:
    prefix = f"{field}="
    if index >= len(lines):
        raise MissingFieldError(field)
    line = lines[index]
    if not line.startswith(prefix):
        raise MissingFieldError(field, line)
    return line[len(prefix) :]


def _parse_deletion_date(value: str) -> datetime:
    if not _DATE_PATTERN.fullmatch(value):
        raise BadDateFormatError(value)
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise BadDateFormatError(value) from exc


__all__ = [
    "HEADER",
    "PATH_FIELD",
    "DELETION_DATE_FIELD",
    "parse_trash_info",
    "serialize_trash_info",
]
