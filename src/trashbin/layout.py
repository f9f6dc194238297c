"""Directory layout of a trash root."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from .errors import TrashIOError
from .trashinfo import TRASH_INFO_SUFFIX

INFO_DIRNAME = "info"
FILES_DIRNAME = "files"

LOGGER = logging.getLogger(__name__)


class TrashLayout(BaseModel):
    """Resolved locations of a trash root and its two parallel directories.

    Attributes:
        root: Trash root containing ``info/`` and ``files/``.
    """

    model_config = ConfigDict(frozen=True)

    root: Path

    @classmethod
    def at(cls, root: Path | str) -> TrashLayout:
        """Return a layout for ``root`` made absolute."""
        return cls(root=Path(os.path.abspath(Path(root).expanduser())))

    @property
    def info_dir(self) -> Path:
        """Return the sidecar directory."""
        return self.root / INFO_DIRNAME

    @property
    def files_dir(self) -> Path:
        """Return the content directory."""
        return self.root / FILES_DIRNAME

    def info_path(self, name: str) -> Path:
        """Return the sidecar path for an entry name."""
        return self.info_dir / f"{name}{TRASH_INFO_SUFFIX}"

    def file_path(self, name: str) -> Path:
        """Return the content path for an entry name."""
        return self.files_dir / name

    def overlaps(self, path: Path) -> bool:
        """Return whether trashing ``path`` would move the trash or something inside it.

        True for the trash root, its ancestors, the ``info/`` and ``files/``
        directories, and anything below them.

        Args:
            path: Absolute, canonical path to test.
        """
        root = self.root.resolve()
        if path == root or path in root.parents:
            return True
        for directory in (self.files_dir, self.info_dir):
            resolved = directory.resolve()
            if path == resolved or resolved in path.parents:
                return True
        return False

    def ensure(self) -> None:
        """Create the trash directories if they are missing.

        Raises:
            TrashIOError: If a directory cannot be created.
        """
        for directory in (self.info_dir, self.files_dir):
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise TrashIOError("create directory", directory, exc.strerror or str(exc)) from exc
        LOGGER.debug("Trash directories ready under %s", self.root)


def default_trash_root(env: Mapping[str, str] | None = None) -> Path:
    """Return the per-user trash root (``$XDG_DATA_HOME/Trash`` or ``~/.local/share/Trash``)."""
    environ = env if env is not None else os.environ
    data_home = environ.get("XDG_DATA_HOME")
    if data_home:
        return Path(data_home).expanduser() / "Trash"
    return Path.home() / ".local" / "share" / "Trash"


__all__ = ["TrashLayout", "INFO_DIRNAME", "FILES_DIRNAME", "default_trash_root"]
