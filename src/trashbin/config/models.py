"""Configuration models describing trashbin settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrashbinBaseModel(BaseModel):
    """Shared configuration for trashbin Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class TrashSettings(TrashbinBaseModel):
    """Location of the trash root.

    Attributes:
        root: Explicit trash root; ``None`` selects the per-user default.
        create_missing: Whether ``info/`` and ``files/`` are created on first use.
    """

    root: Optional[str] = None
    create_missing: bool = True


class SelectionSettings(TrashbinBaseModel):
    """Defaults for selecting entries by pattern.

    Attributes:
        match: How positional patterns are interpreted.
    """

    match: Literal["regex", "glob", "substring", "exact"] = "regex"


class LoggingSettings(TrashbinBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"unknown logging level {value!r}")
        return normalized


class CLIOptions(TrashbinBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
        confirm_default: Whether destructive commands ask before acting.
    """

    quiet_default: bool = False
    summary_default: bool = False
    confirm_default: bool = True


class TrashbinConfig(TrashbinBaseModel):
    """Top-level configuration struct for trashbin.

    Attributes:
        trash: Trash root settings.
        selection: Pattern selection defaults.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    trash: TrashSettings = Field(default_factory=TrashSettings)
    selection: SelectionSettings = Field(default_factory=SelectionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "TrashbinBaseModel",
    "TrashSettings",
    "SelectionSettings",
    "LoggingSettings",
    "CLIOptions",
    "TrashbinConfig",
]
