# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the diagstream package."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, field_validator, model_validator

from .severity import Severity, coerce_severity


class Diagnostic(BaseModel):
    """Single build-tool issue with its source location.

    Instances are immutable; the pipeline only holds them while they wait in
    the priority buffer.
    """

    model_config = ConfigDict(frozen=True)

    severity: Severity
    file: str
    line: NonNegativeInt = 0
    column: NonNegativeInt = 0
    message: str

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: Severity | str | None) -> Severity:
        """Map tool vocabulary onto the closed severity enumeration.

        Args:
            value: Raw severity emitted by the build tool.

        Returns:
            Severity: Canonical severity, ``Severity.UNKNOWN`` for anything unrecognised.
        """

        return coerce_severity(value)


class BuildState(str, Enum):
    """Enumerate the build states reported by the build tool."""

    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    FAILED = "failed"
    INTERRUPTED = "interrupted"
    SUCCESS = "success"


class BuildProgress(BaseModel):
    """Build progress snapshot passed through to callers untouched.

    Counters are only meaningful, and only allowed, while the build is
    :attr:`BuildState.IN_PROGRESS`.
    """

    model_config = ConfigDict(frozen=True)

    state: BuildState
    complete: NonNegativeInt | None = None
    remaining: NonNegativeInt | None = None
    failed: NonNegativeInt | None = None

    @model_validator(mode="after")
    def _check_counters(self) -> BuildProgress:
        """Ensure counters accompany exactly the in-progress state.

        Returns:
            BuildProgress: The validated instance.

        Raises:
            ValueError: If counters are missing while in progress or present otherwise.
        """

        counters = (self.complete, self.remaining, self.failed)
        if self.state is BuildState.IN_PROGRESS:
            if any(value is None for value in counters):
                raise ValueError("in_progress requires complete, remaining and failed counters")
        elif any(value is not None for value in counters):
            raise ValueError(f"counters are only valid while in_progress, not {self.state.value}")
        return self

    @classmethod
    def in_progress(cls, *, complete: int, remaining: int, failed: int) -> BuildProgress:
        """Return an in-progress snapshot.

        Args:
            complete: Number of completed build jobs.
            remaining: Number of jobs still pending.
            failed: Number of jobs that failed so far.

        Returns:
            BuildProgress: Snapshot in the :attr:`BuildState.IN_PROGRESS` state.
        """

        return cls(state=BuildState.IN_PROGRESS, complete=complete, remaining=remaining, failed=failed)


class TruncationReason(str, Enum):
    """Budget that stopped emission of a page."""

    TOKEN_LIMIT = "token_limit"
    MAX_DIAGNOSTICS_LIMIT = "max_diagnostics_limit"


class Summary(BaseModel):
    """Count summary accompanying a page of diagnostics."""

    model_config = ConfigDict(frozen=True)

    total_diagnostics: NonNegativeInt
    returned_diagnostics: NonNegativeInt
    error_count: NonNegativeInt
    warning_count: NonNegativeInt
    build_summary: BuildProgress | None = None


class Response(BaseModel):
    """Budgeted page of diagnostics returned to the caller."""

    model_config = ConfigDict(frozen=True)

    status: str
    diagnostics: tuple[Diagnostic, ...] = Field(default_factory=tuple)
    truncated: bool = False
    truncation_reason: TruncationReason | None = None
    next_cursor: str | None = None
    token_count: NonNegativeInt = 0
    summary: Summary

    @model_validator(mode="after")
    def _check_consistency(self) -> Response:
        """Reject responses whose metadata contradicts their content.

        Returns:
            Response: The validated instance.

        Raises:
            ValueError: If the cursor, truncation flag and counts disagree.
        """

        if self.next_cursor is not None and not self.truncated:
            raise ValueError("next_cursor requires truncated=True")
        if self.truncation_reason is not None and not self.truncated:
            raise ValueError("truncation_reason requires truncated=True")
        if self.summary.returned_diagnostics != len(self.diagnostics):
            raise ValueError("summary.returned_diagnostics must equal the number of diagnostics")
        return self


__all__ = [
    "BuildProgress",
    "BuildState",
    "Diagnostic",
    "Response",
    "Summary",
    "TruncationReason",
]
