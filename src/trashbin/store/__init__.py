"""Trash store: scanning, listing, and bulk operations over a trash root."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path

from trashbin.entry import TrashEntry
from trashbin.errors import EntryNotValidError, TrashError
from trashbin.fsops import iter_names, remove_path
from trashbin.layout import TrashLayout
from trashbin.trashinfo import TRASH_INFO_SUFFIX, SidecarExistsError, TrashInfo

from .models import BatchResult, EmptyResult, ItemFailure

LOGGER = logging.getLogger(__name__)

# Serialises name resolution and creation across every store in the process.
_CREATE_LOCK = threading.Lock()

ListedEntry = tuple[TrashEntry, TrashInfo]


class TrashStore:
    """Operate on the entries of one trash root."""

    def __init__(self, layout: TrashLayout, *, create_missing: bool = True) -> None:
        """Initialize the store.

        Args:
            layout: Trash root to operate on.
            create_missing: Create ``info/`` and ``files/`` on first ``put``.
        """
        self._layout = layout
        self._create_missing = create_missing

    @property
    def layout(self) -> TrashLayout:
        """Return the trash layout backing the store."""
        return self._layout

    # Scanning ---------------------------------------------------------

    def entries(self) -> Iterator[TrashEntry]:
        """Yield every valid entry, scanning ``files/`` afresh on each call.

        Items without a sidecar are logged and skipped. Once the content scan
        is exhausted, sidecars without content are logged as well.

        Raises:
            TrashIOError: If ``files/`` exists but cannot be listed.
        """
        names = list(iter_names(self._layout.files_dir))
        for name in names:
            entry = TrashEntry(self._layout, name)
            try:
                entry.check_valid()
            except EntryNotValidError as exc:
                LOGGER.warning("Skipping %s", exc)
                continue
            yield entry

        scanned = set(names)
        for info_name in iter_names(self._layout.info_dir):
            name = info_name[: -len(TRASH_INFO_SUFFIX)]
            if info_name.endswith(TRASH_INFO_SUFFIX) and name not in scanned:
                LOGGER.warning("Skipping sidecar %s without content", info_name)

    def iter_with_metadata(self) -> Iterator[ListedEntry]:
        """Yield valid entries paired with their parsed sidecars, in scan order.

        Sidecars that fail to parse are logged and skipped.
        """
        for entry in self.entries():
            try:
                info = entry.read_info()
            except TrashError as exc:
                LOGGER.warning("Skipping %s: %s", entry.name, exc)
                continue
            yield entry, info

    def list_with_metadata(self) -> list[ListedEntry]:
        """Return valid entries with their records, stably sorted by deletion date."""
        return sorted(self.iter_with_metadata(), key=lambda pair: pair[1].deletion_date)

    def entry_names(self) -> set[str]:
        """Return every name in use in either directory, paired or not."""
        names = set(iter_names(self._layout.files_dir))
        for info_name in iter_names(self._layout.info_dir):
            if info_name.endswith(TRASH_INFO_SUFFIX):
                names.add(info_name[: -len(TRASH_INFO_SUFFIX)])
        return names

    def strays(self) -> list[Path]:
        """Return files in either directory that do not form a valid entry."""
        found: list[Path] = []
        for name in iter_names(self._layout.files_dir):
            if not TrashEntry(self._layout, name).is_valid():
                found.append(self._layout.file_path(name))
        for info_name in iter_names(self._layout.info_dir):
            path = self._layout.info_dir / info_name
            if not info_name.endswith(TRASH_INFO_SUFFIX):
                found.append(path)
                continue
            name = info_name[: -len(TRASH_INFO_SUFFIX)]
            if not name or not TrashEntry(self._layout, name).is_valid():
                found.append(path)
        return found

    # Single-target operations -----------------------------------------

    def get(self, name: str) -> TrashEntry:
        """Return the valid entry called ``name``.

        Raises:
            EntryNotValidError: If the entry is missing either side.
        """
        return TrashEntry.open(self._layout, name)

    def put(self, source: Path | str) -> TrashEntry:
        """Trash a single path.

        Raises:
            AlreadyInTrashError: If ``source`` is inside the trash.
            TrashIOError: If ``source`` is missing or cannot be moved.
        """
        with _CREATE_LOCK:
            self._prepare()
            return self._create(source, self.entry_names())

    def restore(self, name: str) -> Path:
        """Restore the entry called ``name`` and return its destination."""
        return self.get(name).restore()

    def remove(self, name: str) -> None:
        """Permanently delete the entry called ``name``."""
        self.get(name).remove()

    # Bulk operations --------------------------------------------------

    def put_all(self, sources: Iterable[Path | str]) -> BatchResult:
        """Trash several paths, continuing past individual failures.

        Returns:
            BatchResult: Names of created entries and per-path failures.
        """
        result = BatchResult(operation="put")
        with _CREATE_LOCK:
            self._prepare()
            taken = self.entry_names()
            for source in sources:
                try:
                    entry = self._create(source, taken)
                except TrashError as exc:
                    LOGGER.warning("Failed to trash %s: %s", source, exc)
                    result.record_failure(str(source), exc)
                    continue
                taken.add(entry.name)
                result.succeeded.append(entry.name)
        return result

    def restore_entries(self, entries: Iterable[TrashEntry]) -> BatchResult:
        """Restore each entry, logging and recording failures."""
        result = BatchResult(operation="restore")
        for entry in entries:
            try:
                entry.restore()
            except TrashError as exc:
                LOGGER.warning("Failed to restore %s: %s", entry.name, exc)
                result.record_failure(entry.name, exc)
                continue
            result.succeeded.append(entry.name)
        return result

    def remove_entries(self, entries: Iterable[TrashEntry]) -> BatchResult:
        """Remove each entry, logging and recording failures."""
        result = BatchResult(operation="remove")
        for entry in entries:
            try:
                entry.remove()
            except TrashError as exc:
                LOGGER.warning("Failed to remove %s: %s", entry.name, exc)
                result.record_failure(entry.name, exc)
                continue
            result.succeeded.append(entry.name)
        return result

    def empty(self, keep_strays: bool = False) -> EmptyResult:
        """Remove every valid entry, then optionally every unpaired file.

        Args:
            keep_strays: Leave files that do not form a valid entry in place.

        Returns:
            EmptyResult: Removed names, removed strays, and failures.
        """
        removed = self.remove_entries(self.entries())
        result = EmptyResult(succeeded=removed.succeeded, failures=removed.failures)
        if keep_strays:
            return result

        for path in self.strays():
            try:
                remove_path(path)
            except TrashError as exc:
                LOGGER.warning("Failed to remove stray %s: %s", path, exc)
                result.record_failure(str(path), exc)
                continue
            result.strays_removed.append(str(path))
        LOGGER.info(
            "Emptied trash at %s: %d entries, %d strays",
            self._layout.root,
            len(result.succeeded),
            len(result.strays_removed),
        )
        return result

    # Internal helpers -------------------------------------------------

    def _prepare(self) -> None:
        if self._create_missing:
            self._layout.ensure()

    def _create(self, source: Path | str, taken: set[str]) -> TrashEntry:
        while True:
            try:
                return TrashEntry.create(self._layout, source, taken)
            except SidecarExistsError as exc:
                name = exc.path.name[: -len(TRASH_INFO_SUFFIX)]
                LOGGER.warning("Name %r was taken concurrently; trying the next candidate", name)
                taken.add(name)


__all__ = [
    "TrashStore",
    "ListedEntry",
    "BatchResult",
    "EmptyResult",
    "ItemFailure",
]
