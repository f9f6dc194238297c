"""Configuration resolution helpers."""

from __future__ import annotations

import os
from collections.abc import Mapping as MappingABC
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from trashbin.layout import TrashLayout, default_trash_root

from .exceptions import ConfigError
from .models import TrashbinConfig

ENV_PREFIX = "TRASHBIN__"


def resolve_with_precedence(
    *,
    defaults: TrashbinConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> TrashbinConfig:
    """Merge configuration sources: defaults < file < environment < CLI.

    Override keys may be nested mappings or dotted paths such as ``trash.root``.

    Raises:
        ConfigError: If an override is malformed or the merged result is invalid.
    """
    merged = defaults.model_dump(mode="python")
    for source_name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is not None:
            merged = _deep_merge(merged, _expand_dotted(source, source_name))

    try:
        return TrashbinConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def resolve_trash_root(config: TrashbinConfig, env: Mapping[str, str] | None = None) -> Path:
    """Return the trash root selected by ``config``, falling back to the per-user default."""
    if config.trash.root:
        return Path(config.trash.root).expanduser()
    return default_trash_root(env if env is not None else os.environ)


def resolve_trash_layout(
    config: TrashbinConfig, env: Mapping[str, str] | None = None
) -> TrashLayout:
    """Return the :class:`TrashLayout` for the configured trash root."""
    return TrashLayout.at(resolve_trash_root(config, env))


def _expand_dotted(source: Mapping[str, Any], source_name: str) -> dict[str, Any]:
    label = source_name.capitalize()
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label} overrides must be a mapping.")

    result: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label} override keys must be strings.")
        *parents, leaf = key.split(".")
        node = result
        for segment in parents:
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                raise ConfigError(f"{label} override for {key} conflicts with existing value.")
            node = child
        if isinstance(value, MappingABC):
            nested = _expand_dotted(value, source_name)
            current = node.get(leaf)
            node[leaf] = _deep_merge(current, nested) if isinstance(current, dict) else nested
        else:
            node[leaf] = value
    return result


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "resolve_with_precedence",
    "resolve_trash_root",
    "resolve_trash_layout",
]
