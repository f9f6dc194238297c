"""Sidecar records: model, text format, and on-disk persistence."""

from __future__ import annotations

import logging
from pathlib import Path

from trashbin.errors import TrashIOError

from .errors import (
    BadDateFormatError,
    MissingFieldError,
    MissingHeaderError,
    SidecarExistsError,
    TrashInfoError,
    TrashInfoParseError,
    UnexpectedTrailingContentError,
    WrongExtensionError,
)
from .models import TrashInfo
from .parser import parse_trash_info, serialize_trash_info

TRASH_INFO_SUFFIX = ".trashinfo"

LOGGER = logging.getLogger(__name__)


def read_trash_info(path: Path) -> TrashInfo:
    """Read and parse the sidecar stored at ``path``.

    Args:
        path: Location of a ``.trashinfo`` file.

    Returns:
        TrashInfo: Parsed record.

    Raises:
        WrongExtensionError: If ``path`` lacks the ``.trashinfo`` suffix.
        TrashIOError: If the file cannot be read.
        TrashInfoParseError: If the contents are malformed or not UTF-8.
    """
    if path.suffix != TRASH_INFO_SUFFIX:
        raise WrongExtensionError(path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise TrashIOError("read sidecar", path, exc.strerror or str(exc)) from exc
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TrashInfoParseError(f"Sidecar {path} is not valid UTF-8") from exc
    return parse_trash_info(text)


def write_trash_info(path: Path, record: TrashInfo) -> None:
    """Create ``path`` exclusively and write ``record`` into it.

    Args:
        path: Sidecar location; must not exist yet.
        record: Record to persist.

    Raises:
        SidecarExistsError: If a file already occupies ``path``.
        TrashIOError: If the file cannot be created or written.
    """
    try:
        with path.open("x", encoding="utf-8") as handle:
            handle.write(serialize_trash_info(record) + "\n")
    except FileExistsError as exc:
        raise SidecarExistsError(path) from exc
    except OSError as exc:
        raise TrashIOError("write sidecar", path, exc.strerror or str(exc)) from exc
    LOGGER.debug("Wrote sidecar %s", path)


__all__ = [
    "TRASH_INFO_SUFFIX",
    "TrashInfo",
    "read_trash_info",
    "write_trash_info",
    "parse_trash_info",
    "serialize_trash_info",
    "TrashInfoError",
    "TrashInfoParseError",
    "MissingHeaderError",
    "MissingFieldError",
    "BadDateFormatError",
    "UnexpectedTrailingContentError",
    "WrongExtensionError",
    "SidecarExistsError",
]
