"""Exceptions raised by trash storage operations."""

from __future__ import annotations

from pathlib import Path


class TrashError(Exception):
    """Base exception for trash operations."""


class PercentDecodeError(TrashError):
    """Raised when a percent-encoded path does not decode to valid UTF-8."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Decoded form of {raw!r} is not well-formed UTF-8")
        self.raw = raw


class EntryNotValidError(TrashError):
    """Raised when a trash entry is missing its content file, its sidecar, or both."""

    def __init__(self, name: str, missing: tuple[str, ...]) -> None:
        sides = " and ".join(missing)
        super().__init__(f"Trash entry {name!r} is missing its {sides} path")
        self.name = name
        self.missing = missing


class AlreadyInTrashError(TrashError):
    """Raised when trashing a path that already lives under the trash root."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"{path} is already inside the trash")
        self.path = path


class EntryConsumedError(TrashError):
    """Raised when a restored or removed entry is used again."""

    def __init__(self, name: str, state: str) -> None:
        super().__init__(f"Trash entry {name!r} was already {state}")
        self.name = name
        self.state = state


class TrashIOError(TrashError):
    """Filesystem failure annotated with the operation and path involved.

    The originating ``OSError`` is chained as ``__cause__``.
    """

    def __init__(self, operation: str, path: Path, reason: str) -> None:
        super().__init__(f"Failed to {operation} {path}: {reason}")
        self.operation = operation
        self.path = path
        self.reason = reason


class SelectionError(TrashError):
    """Raised when a range expression or filter cannot be applied."""


__all__ = [
    "TrashError",
    "PercentDecodeError",
    "EntryNotValidError",
    "AlreadyInTrashError",
    "EntryConsumedError",
    "TrashIOError",
    "SelectionError",
]
