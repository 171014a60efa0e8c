# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the response and progress models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from diagstream.core.models import BuildProgress, BuildState, Diagnostic, Response, Summary, TruncationReason
from diagstream.core.severity import Severity


def _summary(returned: int = 0) -> Summary:
    return Summary(total_diagnostics=returned, returned_diagnostics=returned, error_count=returned, warning_count=0)


def test_diagnostic_coerces_tool_severity() -> None:
    diagnostic = Diagnostic(severity="hint", file="lib/a.ml", line=3, column=4, message="unused")

    assert diagnostic.severity is Severity.UNKNOWN
    with pytest.raises(ValidationError):
        Diagnostic(severity="error", file="lib/a.ml", line=-1, column=0, message="bad")


def test_build_progress_requires_counters_only_in_progress() -> None:
    progress = BuildProgress.in_progress(complete=3, remaining=7, failed=1)

    assert progress.state is BuildState.IN_PROGRESS
    with pytest.raises(ValidationError):
        BuildProgress(state=BuildState.IN_PROGRESS, complete=1)
    with pytest.raises(ValidationError):
        BuildProgress(state=BuildState.SUCCESS, complete=1, remaining=0, failed=0)


def test_response_rejects_cursor_without_truncation() -> None:
    with pytest.raises(ValidationError):
        Response(status="success", next_cursor="abc", summary=_summary())
    with pytest.raises(ValidationError):
        Response(status="success", truncation_reason=TruncationReason.TOKEN_LIMIT, summary=_summary())


def test_response_requires_returned_count_to_match() -> None:
    with pytest.raises(ValidationError):
        Response(status="success", summary=_summary(returned=2))


def test_response_serialises_wire_names() -> None:
    response = Response(
        status="waiting",
        truncated=True,
        truncation_reason=TruncationReason.MAX_DIAGNOSTICS_LIMIT,
        next_cursor="token",
        summary=Summary(
            total_diagnostics=5,
            returned_diagnostics=0,
            error_count=0,
            warning_count=0,
            build_summary=BuildProgress(state=BuildState.WAITING),
        ),
    )

    payload = response.model_dump(mode="json")

    assert payload["truncation_reason"] == "max_diagnostics_limit"
    assert payload["summary"]["build_summary"]["state"] == "waiting"
    assert payload["diagnostics"] == []
