# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Diagnostics package exposing the streaming page pipeline and its stages."""

from __future__ import annotations

from .assembler import assemble_response, describe_status
from .filtering import DiagnosticPredicate, FilePattern, FilterSpec, compile_filter, filter_stream
from .pagination import (
    BudgetSpec,
    Cursor,
    decode_cursor,
    encode_cursor,
    fingerprint,
    next_cursor,
    resolve_skip,
    skip,
)
from .pipeline import DiagnosticPipeline, PipelineState
from .stream import BudgetLimiter, Deadline, PriorityBuffer, guard_deadline
from .tokens import diagnostic_cost, estimate_diagnostic_tokens, estimate_response_tokens, estimate_text_tokens

__all__ = (
    "BudgetLimiter",
    "BudgetSpec",
    "Cursor",
    "Deadline",
    "DiagnosticPipeline",
    "DiagnosticPredicate",
    "FilePattern",
    "FilterSpec",
    "PipelineState",
    "PriorityBuffer",
    "assemble_response",
    "compile_filter",
    "decode_cursor",
    "describe_status",
    "diagnostic_cost",
    "encode_cursor",
    "estimate_diagnostic_tokens",
    "estimate_response_tokens",
    "estimate_text_tokens",
    "filter_stream",
    "fingerprint",
    "guard_deadline",
    "next_cursor",
    "resolve_skip",
    "skip",
)
