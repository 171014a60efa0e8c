# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Assemble budgeted pages into :class:`Response` objects."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Final

from ..core.models import BuildProgress, BuildState, Diagnostic, Response, Summary, TruncationReason

STATUS_UNKNOWN: Final[str] = "unknown"
STATUS_SUCCESS: Final[str] = "success"
STATUS_SUCCESS_WITH_WARNINGS: Final[str] = "success_with_warnings"


def describe_status(progress: BuildProgress | None, *, saw_diagnostics: bool) -> str:
    """Return the human readable status line for ``progress``.

    Args:
        progress: Build progress snapshot, ``None`` when the source has none.
        saw_diagnostics: Whether the source yielded any diagnostic this call.

    Returns:
        str: Status such as ``"building (3/10 completed, 1 failed)"``.
    """

    if progress is None:
        return STATUS_UNKNOWN
    match progress.state:
        case BuildState.IN_PROGRESS:
            complete = progress.complete or 0
            total = complete + (progress.remaining or 0)
            return f"building ({complete}/{total} completed, {progress.failed or 0} failed)"
        case BuildState.SUCCESS:
            return STATUS_SUCCESS_WITH_WARNINGS if saw_diagnostics else STATUS_SUCCESS
        case _:
            return progress.state.value


def assemble_response(
    diagnostics: Sequence[Diagnostic],
    *,
    total_observed: int,
    token_count: int,
    truncation_reason: TruncationReason | None,
    next_cursor: str | None,
    progress: BuildProgress | None,
    saw_diagnostics: bool,
) -> Response:
    """Aggregate one page and its metadata into a response.

    Args:
        diagnostics: Emitted diagnostics in priority order.
        total_observed: Diagnostics admitted by the filter during this call.
        token_count: Summed cost of ``diagnostics``.
        truncation_reason: Budget that stopped emission, if any.
        next_cursor: Continuation token, only present on truncated pages.
        progress: Build progress copied into the summary unchanged.
        saw_diagnostics: Whether the source yielded anything before filtering.

    Returns:
        Response: Validated response.
    """

    error_count = sum(1 for diagnostic in diagnostics if diagnostic.severity.is_error)
    summary = Summary(
        total_diagnostics=total_observed,
        returned_diagnostics=len(diagnostics),
        error_count=error_count,
        warning_count=len(diagnostics) - error_count,
        build_summary=progress,
    )
    return Response(
        status=describe_status(progress, saw_diagnostics=saw_diagnostics),
        diagnostics=tuple(diagnostics),
        truncated=truncation_reason is not None,
        truncation_reason=truncation_reason,
        next_cursor=next_cursor,
        token_count=token_count,
        summary=summary,
    )


__all__ = ["assemble_response", "describe_status"]
