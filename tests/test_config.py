# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for layered settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from diagstream.config import ConfigError, PipelineSettings, load_settings
from diagstream.core.calibration import Calibration
from diagstream.config.loaders import DefaultSettingsSource, TomlSettingsSource


def test_load_settings_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path)

    assert settings == PipelineSettings()
    assert settings.default_token_limit == 25_000
    assert settings.buffer_capacity == 10_000
    assert settings.max_diagnostics_ceiling == 1_000
    assert settings.cost_safety_percent == 140


def test_project_file_overrides_pyproject(tmp_path: Path) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
[project]
name = "demo"

[tool.diagstream]
default_token_limit = 8000
buffer_capacity = 5000
""".strip(),
        encoding="utf-8",
    )
    (tmp_path / ".diagstream.toml").write_text("default_token_limit = 4000\n", encoding="utf-8")

    settings = load_settings(tmp_path)

    assert settings.default_token_limit == 4000
    assert settings.buffer_capacity == 5000


def test_environment_variables_expand(tmp_path: Path) -> None:
    (tmp_path / ".diagstream.toml").write_text('default_token_limit = "${DIAG_TOKENS}"\n', encoding="utf-8")

    settings = load_settings(tmp_path, env={"DIAG_TOKENS": "1234"})

    assert settings.default_token_limit == 1234


def test_invalid_values_raise_config_error(tmp_path: Path) -> None:
    (tmp_path / ".diagstream.toml").write_text("cost_safety_percent = 50\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(tmp_path)


def test_unknown_keys_raise_config_error(tmp_path: Path) -> None:
    (tmp_path / ".diagstream.toml").write_text("page_size = 5\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(tmp_path)


def test_ceiling_cannot_exceed_buffer(tmp_path: Path) -> None:
    (tmp_path / ".diagstream.toml").write_text("buffer_capacity = 10\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="buffer_capacity"):
        load_settings(tmp_path)


def test_broken_toml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".diagstream.toml").write_text("default_token_limit = \n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_settings(tmp_path)


def test_explicit_sources(tmp_path: Path) -> None:
    custom = tmp_path / "custom.toml"
    custom.write_text("max_diagnostics_ceiling = 50\n", encoding="utf-8")

    settings = load_settings(sources=[DefaultSettingsSource(), TomlSettingsSource(custom)])

    assert settings.max_diagnostics_ceiling == 50


def test_calibration_accepts_preset_name(tmp_path: Path) -> None:
    (tmp_path / ".diagstream.toml").write_text('calibration = "conservative"\n', encoding="utf-8")

    settings = load_settings(tmp_path)

    assert settings.calibration == Calibration.preset("conservative")


def test_calibration_accepts_factor_table(tmp_path: Path) -> None:
    (tmp_path / ".diagstream.toml").write_text(
        "[calibration]\nerror_message = 1200\nconservative_margin = 1100\n",
        encoding="utf-8",
    )

    settings = load_settings(tmp_path)

    assert settings.calibration.error_message == 1200
    assert settings.calibration.conservative_margin == 1100
    assert settings.calibration.code == 1000


def test_unknown_calibration_preset_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".diagstream.toml").write_text('calibration = "aggressive"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="calibration"):
        load_settings(tmp_path)
