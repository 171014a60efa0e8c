# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Exceptions raised while paging diagnostics.

Every exception here fails the whole call: a caller never receives a partial
page alongside one of these errors. Truncation is not an error and is reported
on the response instead.
"""

from __future__ import annotations


class DiagstreamError(RuntimeError):
    """Base class for failures surfaced to callers."""


class InvalidFilterError(DiagstreamError):
    """Raised when a severity selection or file pattern cannot be used."""

    def __init__(self, field: str, reason: str) -> None:
        """Record the offending request field alongside the reason.

        Args:
            field: Name of the request field that failed validation.
            reason: Human-readable explanation of the failure.
        """

        super().__init__(f"invalid {field}: {reason}")
        self.field = field
        self.reason = reason


class InvalidRequestError(DiagstreamError):
    """Raised when a budget field is outside its accepted range."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"invalid {field}: {reason}")
        self.field = field
        self.reason = reason


class InvalidCursorError(DiagstreamError):
    """Raised when a continuation cursor is malformed or bound to another request.

    Callers must restart pagination from the first page.
    """


class SourceUnavailableError(DiagstreamError):
    """Raised when the diagnostic source cannot be reached or read."""


class DeadlineExceededError(DiagstreamError):
    """Raised when a caller deadline expires while pulling diagnostics."""


class CostEstimationError(DiagstreamError):
    """Raised when a diagnostic cannot be priced by the token cost model."""


__all__ = [
    "CostEstimationError",
    "DeadlineExceededError",
    "DiagstreamError",
    "InvalidCursorError",
    "InvalidFilterError",
    "InvalidRequestError",
    "SourceUnavailableError",
]
