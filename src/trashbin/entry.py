"""Trash entries: one logical name bound to a content path and a sidecar path."""

from __future__ import annotations

import logging
import os
from collections.abc import Set
from enum import Enum
from pathlib import Path

from .errors import (
    AlreadyInTrashError,
    EntryConsumedError,
    EntryNotValidError,
    TrashError,
    TrashIOError,
)
from .fsops import move_path, remove_path
from .layout import TrashLayout
from .naming import resolve_unique_name
from .trashinfo import TrashInfo, TrashInfoError, read_trash_info, write_trash_info

LOGGER = logging.getLogger(__name__)


class EntryState(str, Enum):
    """Lifecycle state of a bound entry. ``RESTORED`` and ``REMOVED`` are terminal."""

    VALID = "valid"
    RESTORED = "restored"
    REMOVED = "removed"


class TrashEntry:
    """A trashed item: ``files/<name>`` plus ``info/<name>.trashinfo``.

    Instances are obtained through :meth:`open` (lookup of an existing entry)
    or :meth:`create` (trashing a path). :meth:`restore` and :meth:`remove`
    consume the entry; any later use raises :class:`EntryConsumedError`.
    """

    def __init__(self, layout: TrashLayout, name: str) -> None:
        self._layout = layout
        self._name = name
        self._state = EntryState.VALID

    @classmethod
    def open(cls, layout: TrashLayout, name: str) -> TrashEntry:
        """Look up an existing entry by name.

        Only the final component of ``name`` is used, so a path into
        ``files/`` is accepted as well.

        Args:
            layout: Trash layout holding the entry.
            name: Entry name.

        Returns:
            TrashEntry: The bound entry.

        Raises:
            TrashError: If ``name`` has no final component.
            EntryNotValidError: If either side of the entry is missing.
        """
        base = Path(name).name
        if not base:
            raise TrashError(f"{name!r} does not name a trash entry")
        entry = cls(layout, base)
        entry.check_valid()
        return entry

    @classmethod
    def create(cls, layout: TrashLayout, source: Path | str, existing: Set[str]) -> TrashEntry:
        """Move ``source`` into the trash and record where it came from.

        The sidecar is written first with exclusive creation, then the content
        is moved. If the move fails the sidecar stays behind without content;
        scans skip such leftovers and ``empty`` cleans them up.

        Args:
            layout: Trash layout to move the item into.
            source: File, directory or symlink to trash.
            existing: Snapshot of entry names already in use.

        Returns:
            TrashEntry: The newly bound entry.

        Raises:
            AlreadyInTrashError: If ``source`` is the trash, inside it, or one of its ancestors.
            SidecarExistsError: If the chosen sidecar name is already taken.
            TrashIOError: If ``source`` is missing or the move fails.
        """
        path = Path(source).expanduser()
        if path.name in ("", ".."):
            raise TrashError(f"Refusing to trash {path}")
        # The final component stays unresolved so a symlink is trashed as the link.
        canonical = path.parent.resolve() / path.name
        if layout.overlaps(canonical):
            raise AlreadyInTrashError(canonical)
        if not os.path.lexists(path):
            exc = FileNotFoundError(f"No such file or directory: {canonical}")
            raise TrashIOError("trash", canonical, "No such file or directory") from exc

        name = resolve_unique_name(canonical.name, existing)
        write_trash_info(layout.info_path(name), TrashInfo.for_path(canonical))
        try:
            move_path(path, layout.file_path(name))
        except TrashIOError:
            LOGGER.warning("Sidecar for %s left without content after failed move", name)
            raise
        LOGGER.info("Trashed %s as %s", canonical, name)
        return cls(layout, name)

    @property
    def name(self) -> str:
        """Return the entry name shared by both paths."""
        return self._name

    @property
    def info_path(self) -> Path:
        """Return the sidecar path."""
        return self._layout.info_path(self._name)

    @property
    def file_path(self) -> Path:
        """Return the content path."""
        return self._layout.file_path(self._name)

    @property
    def state(self) -> EntryState:
        """Return the lifecycle state."""
        return self._state

    def missing(self) -> tuple[str, ...]:
        """Return which sides (``"info"``, ``"file"``) are absent on disk."""
        absent: list[str] = []
        if not os.path.lexists(self.info_path):
            absent.append("info")
        if not os.path.lexists(self.file_path):
            absent.append("file")
        return tuple(absent)

    def is_valid(self) -> bool:
        """Return whether both the content and the sidecar exist."""
        return not self.missing()

    def check_valid(self) -> None:
        """Raise :class:`EntryNotValidError` naming any missing side."""
        absent = self.missing()
        if absent:
            raise EntryNotValidError(self._name, absent)

    def read_info(self) -> TrashInfo:
        """Parse this entry's sidecar."""
        return read_trash_info(self.info_path)

    def restore(self) -> Path:
        """Move the content back to its recorded location, then drop the sidecar.

        The destination's parent must exist and the destination must be free.
        If the move fails nothing is deleted and the entry stays valid.

        Returns:
            Path: The location the content was restored to.

        Raises:
            EntryConsumedError: If the entry was already restored or removed.
            EntryNotValidError: If either side is missing.
            TrashInfoError: If the sidecar is unreadable or records a relative path.
            PercentDecodeError: If the recorded path is not valid UTF-8.
            TrashIOError: If moving the content or deleting the sidecar fails.
        """
        self._ensure_unconsumed()
        self.check_valid()
        destination = self.read_info().original_path()
        if not destination.is_absolute():
            raise TrashInfoError(f"Recorded path {destination} for {self._name!r} is not absolute")

        move_path(self.file_path, destination)
        remove_path(self.info_path)
        self._state = EntryState.RESTORED
        LOGGER.info("Restored %s to %s", self._name, destination)
        return destination

    def remove(self) -> None:
        """Permanently delete the content (recursively), then the sidecar.

        Raises:
            EntryConsumedError: If the entry was already restored or removed.
            EntryNotValidError: If either side is missing.
            TrashIOError: If a deletion fails.
        """
        self._ensure_unconsumed()
        self.check_valid()
        remove_path(self.file_path)
        remove_path(self.info_path)
        self._state = EntryState.REMOVED
        LOGGER.info("Removed %s", self._name)

    def _ensure_unconsumed(self) -> None:
        if self._state is not EntryState.VALID:
            raise EntryConsumedError(self._name, self._state.value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TrashEntry):
            return NotImplemented
        return self._layout == other._layout and self._name == other._name

    def __hash__(self) -> int:
        return hash((self._layout.root, self._name))

    def __repr__(self) -> str:
        return f"TrashEntry(name={self._name!r}, root={str(self._layout.root)!r})"


__all__ = ["EntryState", "TrashEntry"]
