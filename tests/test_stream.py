# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the priority buffer, skip stage, budget limiter and deadline guard."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

import pytest

from diagstream.core.models import Diagnostic, TruncationReason
from diagstream.core.severity import Severity
from diagstream.diagnostics.pagination import skip
from diagstream.diagnostics.stream import BudgetLimiter, Deadline, PriorityBuffer, guard_deadline
from diagstream.errors import DeadlineExceededError


def _unit_cost(_: Diagnostic) -> int:
    return 10


def test_priority_buffer_emits_errors_first(mixed_diagnostics: list[Diagnostic]) -> None:
    buffer = PriorityBuffer(capacity=100).fill(mixed_diagnostics)

    drained = list(buffer.drain())

    assert [diag.severity for diag in drained] == [Severity.ERROR] * 4 + [Severity.WARNING] * 6
    errors = [diag for diag in mixed_diagnostics if diag.severity is Severity.ERROR]
    assert drained[:4] == errors
    assert buffer.observed == 10
    assert not buffer.saturated
    assert list(buffer.drain()) == []


def test_priority_buffer_routes_unknown_with_warnings(diagnostic_factory: Callable[..., Diagnostic]) -> None:
    unknown = diagnostic_factory(severity="note", message="first")
    error = diagnostic_factory(severity="error", message="second")
    warning = diagnostic_factory(severity="warning", message="third")

    drained = list(PriorityBuffer(capacity=10).fill([unknown, error, warning]).drain())

    assert drained == [error, unknown, warning]


def test_priority_buffer_stops_at_capacity(
    mixed_diagnostics: list[Diagnostic],
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING, logger="diagstream"):
        buffer = PriorityBuffer(capacity=4).fill(mixed_diagnostics)

    assert buffer.saturated
    assert buffer.observed == 4
    assert len(list(buffer.drain())) == 4
    assert "capacity" in caplog.text


def test_priority_buffer_not_saturated_at_exact_capacity(mixed_diagnostics: list[Diagnostic]) -> None:
    buffer = PriorityBuffer(capacity=10).fill(mixed_diagnostics)

    assert not buffer.saturated
    assert buffer.observed == 10


def test_priority_buffer_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        PriorityBuffer(capacity=0)


def test_skip_drops_leading_items(mixed_diagnostics: list[Diagnostic]) -> None:
    assert list(skip(mixed_diagnostics, 7)) == mixed_diagnostics[7:]
    assert list(skip(mixed_diagnostics, 20)) == []


def test_budget_limiter_count_limit(mixed_diagnostics: list[Diagnostic]) -> None:
    limiter = BudgetLimiter(cost=_unit_cost, max_diagnostics=3)

    emitted = list(limiter.limit(mixed_diagnostics))

    assert emitted == mixed_diagnostics[:3]
    assert limiter.truncation_reason is TruncationReason.MAX_DIAGNOSTICS_LIMIT
    assert limiter.tokens == 30


def test_budget_limiter_token_limit(mixed_diagnostics: list[Diagnostic]) -> None:
    limiter = BudgetLimiter(cost=_unit_cost, token_limit=25)

    emitted = list(limiter.limit(mixed_diagnostics))

    assert len(emitted) == 2
    assert limiter.truncation_reason is TruncationReason.TOKEN_LIMIT
    assert limiter.tokens == 20


def test_budget_limiter_prefers_count_when_both_trigger(mixed_diagnostics: list[Diagnostic]) -> None:
    limiter = BudgetLimiter(cost=_unit_cost, max_diagnostics=2, token_limit=20)

    emitted = list(limiter.limit(mixed_diagnostics))

    assert len(emitted) == 2
    assert limiter.truncation_reason is TruncationReason.MAX_DIAGNOSTICS_LIMIT


def test_budget_limiter_exact_fit_is_not_truncation(mixed_diagnostics: list[Diagnostic]) -> None:
    limiter = BudgetLimiter(cost=_unit_cost, max_diagnostics=10, token_limit=100)

    emitted = list(limiter.limit(mixed_diagnostics))

    assert len(emitted) == 10
    assert not limiter.truncated
    assert limiter.truncation_reason is None


def test_budget_limiter_pulls_one_past_the_page(mixed_diagnostics: list[Diagnostic]) -> None:
    pulled: list[Diagnostic] = []

    def upstream():
        for diagnostic in mixed_diagnostics:
            pulled.append(diagnostic)
            yield diagnostic

    list(BudgetLimiter(cost=_unit_cost, max_diagnostics=3).limit(upstream()))

    assert len(pulled) == 4


def test_guard_deadline_raises_once_expired(mixed_diagnostics: list[Diagnostic]) -> None:
    expired = Deadline(expires_at=time.monotonic() - 1.0)

    with pytest.raises(DeadlineExceededError):
        list(guard_deadline(mixed_diagnostics, expired))


def test_guard_deadline_passes_items_through_before_expiry(mixed_diagnostics: list[Diagnostic]) -> None:
    assert list(guard_deadline(mixed_diagnostics, Deadline.after(60.0))) == mixed_diagnostics
    assert list(guard_deadline(mixed_diagnostics, None)) == mixed_diagnostics
