# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Concrete diagnostic sources."""

from __future__ import annotations

from .jsonl import JsonLinesSource
from .snapshot import SnapshotSource

__all__ = ["JsonLinesSource", "SnapshotSource"]
