# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Configuration models and loaders for diagstream."""

from __future__ import annotations

from .loaders import load_settings
from .models import ConfigError, PipelineSettings

__all__ = ["ConfigError", "PipelineSettings", "load_settings"]
