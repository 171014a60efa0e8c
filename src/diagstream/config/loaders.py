# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Layered configuration sources (defaults, pyproject, project file)."""

from __future__ import annotations

import logging
import os
import re
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import ValidationError

from .models import ConfigError, PipelineSettings

LOGGER = logging.getLogger(__name__)

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PROJECT_CONFIG_FILENAME: Final[str] = ".diagstream.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "diagstream"

_ENV_VAR_PATTERN = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class SettingsSource(Protocol):
    """Provide one configuration fragment."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return the fragment contributed by this source."""
        ...

    def describe(self) -> str:
        """Return a human readable description of the source."""
        ...


class DefaultSettingsSource:
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return PipelineSettings().to_dict()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlSettingsSource:
    """Load settings from a standalone TOML document."""

    def __init__(self, path: Path, *, name: str | None = None, env: Mapping[str, str] | None = None) -> None:
        self._path = path
        self.name = name or str(path)
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {self._path}: {exc}") from exc
        return _expand_env(self._select(data), self._env)

    def _select(self, document: Mapping[str, Any]) -> Mapping[str, Any]:
        return document

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectSettingsSource(TomlSettingsSource):
    """Read settings from ``[tool.diagstream]`` within ``pyproject.toml``."""

    def _select(self, document: Mapping[str, Any]) -> Mapping[str, Any]:
        tool_section = document.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if section is None:
            return {}
        if not isinstance(section, Mapping):
            raise ConfigError(f"[tool.{PYPROJECT_SECTION_KEY}] in {self._path} must be a table")
        return section

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


def default_sources(root: Path, *, env: Mapping[str, str] | None = None) -> list[SettingsSource]:
    """Return the configuration sources for ``root`` in increasing precedence.

    Args:
        root: Project directory searched for configuration files.
        env: Environment used for ``${VAR}`` expansion, defaults to :data:`os.environ`.

    Returns:
        list[SettingsSource]: Defaults, ``pyproject.toml`` and ``.diagstream.toml``.
    """

    return [
        DefaultSettingsSource(),
        PyProjectSettingsSource(root / PYPROJECT_FILENAME, env=env),
        TomlSettingsSource(root / PROJECT_CONFIG_FILENAME, env=env),
    ]


def load_settings(
    root: Path | None = None,
    *,
    sources: Sequence[SettingsSource] | None = None,
    env: Mapping[str, str] | None = None,
) -> PipelineSettings:
    """Merge configuration fragments into validated settings.

    Args:
        root: Project directory, defaults to the current working directory.
        sources: Explicit sources overriding the default layering.
        env: Environment used for ``${VAR}`` expansion.

    Returns:
        PipelineSettings: Validated settings.

    Raises:
        ConfigError: If a file is unreadable or a value is invalid.
    """

    layers = sources if sources is not None else default_sources(root or Path.cwd(), env=env)
    merged: dict[str, Any] = {}
    for source in layers:
        fragment = source.load()
        if fragment:
            LOGGER.debug("loaded %d setting(s) from %s", len(fragment), source.describe())
        merged.update(fragment)
    try:
        return PipelineSettings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid diagstream configuration: {exc}") from exc


def _expand_env(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    return {key: _expand_env_value(value, env) for key, value in data.items()}


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _expand_env_string(value, env)
    if isinstance(value, Mapping):
        return _expand_env(value, env)
    if isinstance(value, list):
        return [_expand_env_value(item, env) for item in value]
    return value


def _expand_env_string(value: str, env: Mapping[str, str]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        return env.get(key, match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


__all__ = [
    "DefaultSettingsSource",
    "PyProjectSettingsSource",
    "SettingsSource",
    "TomlSettingsSource",
    "default_sources",
    "load_settings",
]
