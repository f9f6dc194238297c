"""Sidecar record model."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from trashbin.percent_path import PercentPath


class TrashInfo(BaseModel):
    """Parsed contents of a ``.trashinfo`` sidecar.

    Records order by ``deletion_date``; equal timestamps compare as neither
    less nor greater, so callers needing determinism should sort stably.

    Attributes:
        percent_path: Encoded original location of the trashed item.
        deletion_date: Local wall-clock time of deletion, second precision.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    percent_path: PercentPath
    deletion_date: datetime

    @field_validator("deletion_date")
    @classmethod
    def _local_seconds(cls, value: datetime) -> datetime:
        if value.tzinfo is not None:
            value = value.astimezone().replace(tzinfo=None)
        return value.replace(microsecond=0)

    @classmethod
    def for_path(cls, path: Path | str, deletion_date: Optional[datetime] = None) -> TrashInfo:
        """Build a record for ``path`` deleted at ``deletion_date`` (default: now)."""
        return cls(
            percent_path=PercentPath.from_path(path),
            deletion_date=deletion_date or datetime.now(),
        )

    @property
    def deletion_date_text(self) -> str:
        """Return the deletion date formatted for the sidecar."""
        return self.deletion_date.isoformat(timespec="seconds")

    def original_path(self) -> Path:
        """Return the decoded original location.

        Raises:
            PercentDecodeError: If the stored path is not valid UTF-8.
        """
        return Path(self.percent_path.decoded())

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, TrashInfo):
            return NotImplemented
        return self.deletion_date < other.deletion_date


__all__ = ["TrashInfo"]
