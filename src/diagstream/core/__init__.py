# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Core value types shared by every pipeline stage."""

from __future__ import annotations

from .calibration import CALIBRATION_PRESETS, Calibration, ContentKind, LengthTier, classify_content, classify_length
from .models import BuildProgress, BuildState, Diagnostic, Response, Summary, TruncationReason
from .severity import Severity, SeverityFilter, coerce_severity, parse_severity_filter

__all__ = [
    "BuildProgress",
    "BuildState",
    "CALIBRATION_PRESETS",
    "Calibration",
    "ContentKind",
    "Diagnostic",
    "LengthTier",
    "Response",
    "Severity",
    "SeverityFilter",
    "Summary",
    "TruncationReason",
    "classify_content",
    "classify_length",
    "coerce_severity",
    "parse_severity_filter",
]
