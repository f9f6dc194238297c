"""Sidecar (``.trashinfo``) errors."""

from __future__ import annotations

from pathlib import Path

from trashbin.errors import TrashError


class TrashInfoError(TrashError):
    """Base exception for sidecar reading and writing."""


class TrashInfoParseError(TrashInfoError):
    """Raised when sidecar text does not follow the record grammar."""


class MissingHeaderError(TrashInfoParseError):
    """Raised when the first line is not ``[Trash Info]``."""

    def __init__(self, line: str | None) -> None:
        found = "nothing" if line is None else repr(line)
        super().__init__(f"Expected header '[Trash Info]', found {found}")
        self.line = line


class MissingFieldError(TrashInfoParseError):
    """Raised when a required key is absent from its fixed line."""

    def __init__(self, field: str, line: str | None = None) -> None:
        found = "end of input" if line is None else repr(line)
        super().__init__(f"Expected field '{field}=', found {found}")
        self.field = field
        self.line = line


class BadDateFormatError(TrashInfoParseError):
    """Raised when ``DeletionDate`` is not ``YYYY-MM-DDTHH:MM:SS``."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Deletion date {value!r} is not formatted as YYYY-MM-DDTHH:MM:SS")
        self.value = value


class UnexpectedTrailingContentError(TrashInfoParseError):
    """Raised when text follows the ``DeletionDate`` line."""

    def __init__(self, line: str) -> None:
        super().__init__(f"Unexpected content after DeletionDate: {line!r}")
        self.line = line


class WrongExtensionError(TrashInfoError):
    """Raised when a sidecar path does not end in ``.trashinfo``."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Sidecar path {path} does not have the .trashinfo extension")
        self.path = path


class SidecarExistsError(TrashInfoError):
    """Raised when exclusive creation finds the sidecar name already taken."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Sidecar {path} already exists")
        self.path = path


__all__ = [
    "TrashInfoError",
    "TrashInfoParseError",
    "MissingHeaderError",
    "MissingFieldError",
    "BadDateFormatError",
    "UnexpectedTrailingContentError",
    "WrongExtensionError",
    "SidecarExistsError",
]
