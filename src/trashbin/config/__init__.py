"""Configuration management for trashbin."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import TrashbinConfig
from .resolver import (
    ENV_PREFIX,
    resolve_trash_layout,
    resolve_trash_root,
    resolve_with_precedence,
)

DEFAULT_CONFIG_PATH = Path("~/.trashbin/config.yaml")
_CONFIG_HEADER = textwrap.dedent(
    """\
    # trashbin configuration file
    # Generated automatically; manage via `trashbin config edit` or `trashbin config set`.
    """
)


class ConfigManager:
    """Read and write the trashbin YAML configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the user-expanded location of the configuration file."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> TrashbinConfig:
        """Load configuration data from disk, applying precedence rules.

        Args:
            cli_overrides: Dotted-key overrides with the highest precedence.
            include_env: Whether ``TRASHBIN__*`` variables are honoured.
            ensure_file: Whether a default file is written when none exists.
            env_overrides: Environment mapping to use instead of the process environment.

        Returns:
            TrashbinConfig: Validated configuration.

        Raises:
            ConfigError: If the file or any override is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        env_data: Mapping[str, str] | None = None
        if include_env:
            env_data = env_overrides if env_overrides is not None else self._env

        return resolve_with_precedence(
            defaults=TrashbinConfig(),
            file_overrides=self._read_file(),
            env_overrides=self._extract_env(env_data) if env_data else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the unvalidated mapping stored in the file."""
        return self._read_file()

    def save(self, config: TrashbinConfig | Mapping[str, Any]) -> None:
        """Replace the file contents with ``config``."""
        if isinstance(config, TrashbinConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
        self._write_file(data)

    def ensure_exists(self) -> Path:
        """Write the default configuration on first use and return its path."""
        if not self._config_path.exists():
            self._write_file(TrashbinConfig().model_dump(mode="python"))
        return self._config_path

    def read_text(self) -> str:
        """Return the file text, or an empty string when it does not exist yet."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def set_value(self, key: str, value: Any) -> dict[str, Any]:
        """Assign ``value`` at dotted ``key`` in the file overrides and persist them.

        Args:
            key: Dotted path such as ``trash.root``.
            value: Value to store.

        Returns:
            dict[str, Any]: The updated file overrides.

        Raises:
            ConfigError: If the key is empty, collides with a scalar, or the result is invalid.
        """
        segments = [segment.strip() for segment in key.split(".") if segment.strip()]
        if not segments:
            raise ConfigError("KEY must specify a dotted path such as 'trash.root'.")

        data = self._read_file()
        node = data
        for segment in segments[:-1]:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(
                    f"Cannot assign into '{segment}' because it is not a mapping "
                    "in the config file."
                )
            node = child
        node[segments[-1]] = value

        resolve_with_precedence(defaults=TrashbinConfig(), file_overrides=data)
        self._write_file(data)
        return data

    # Internal helpers -------------------------------------------------

    def _read_file(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")

        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8"
        )

    def _extract_env(self, env: Mapping[str, str]) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for key, raw_value in env.items():
            if not key.startswith(ENV_PREFIX):
                continue
            dotted = ".".join(part.lower() for part in key[len(ENV_PREFIX) :].split("__") if part)
            if not dotted:
                continue
            try:
                overrides[dotted] = yaml.safe_load(raw_value)
            except yaml.YAMLError:
                overrides[dotted] = raw_value
        return overrides


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "TrashbinConfig",
    "resolve_with_precedence",
    "resolve_trash_root",
    "resolve_trash_layout",
    "ConfigError",
]
