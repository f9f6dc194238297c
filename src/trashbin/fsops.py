"""Filesystem helpers that wrap ``OSError`` with operation context."""

from __future__ import annotations

import errno
import logging
import os
import shutil
from collections.abc import Iterator
from pathlib import Path

from .errors import TrashIOError

LOGGER = logging.getLogger(__name__)


def _wrap(operation: str, path: Path, exc: OSError) -> TrashIOError:
    return TrashIOError(operation, path, exc.strerror or str(exc))


def move_path(source: Path, destination: Path) -> None:
    """Move ``source`` to ``destination`` without overwriting.

    A same-filesystem rename is attempted first; across filesystems the item
    is copied (recursively for directories, preserving symlinks) and the
    source deleted afterwards. The destination's parent is never created.

    Raises:
        TrashIOError: If the destination exists or the move fails. The
            original ``OSError`` is chained.
    """
    if os.path.lexists(destination):
        exc = FileExistsError(errno.EEXIST, os.strerror(errno.EEXIST), str(destination))
        raise _wrap("move to", destination, exc) from exc
    try:
        os.rename(source, destination)
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise _wrap(f"move {source} to", destination, exc) from exc
        LOGGER.debug("Cross-device move of %s, copying instead", source)
        _copy_then_delete(source, destination)
    LOGGER.debug("Moved %s -> %s", source, destination)


def _copy_then_delete(source: Path, destination: Path) -> None:
    try:
        if source.is_dir() and not source.is_symlink():
            shutil.copytree(source, destination, symlinks=True)
        else:
            shutil.copy2(source, destination, follow_symlinks=False)
    except OSError as exc:
        raise _wrap(f"copy {source} to", destination, exc) from exc
    remove_path(source)


def remove_path(path: Path) -> None:
    """Delete a file, symlink, or directory tree.

    Raises:
        TrashIOError: If deletion fails.
    """
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as exc:
        raise _wrap("remove", path, exc) from exc
    LOGGER.debug("Removed %s", path)


def iter_names(directory: Path) -> Iterator[str]:
    """Yield the entry names of ``directory`` in sorted order.

    A missing directory yields nothing.

    Raises:
        TrashIOError: If the directory exists but cannot be read.
    """
    try:
        names = sorted(os.listdir(directory))
    except FileNotFoundError:
        LOGGER.debug("Directory %s does not exist", directory)
        return
    except OSError as exc:
        raise _wrap("list", directory, exc) from exc
    yield from names


__all__ = ["move_path", "remove_path", "iter_names"]
