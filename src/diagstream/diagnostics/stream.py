# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Pull-based stages that prioritise and budget a diagnostic stream.

Each stage is an iterator that asks its upstream for the next item only when
its own consumer asks for one. Memory is bounded by the priority buffer
capacity, never by the length of the source.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from ..core.models import Diagnostic, TruncationReason
from ..errors import DeadlineExceededError

LOGGER = logging.getLogger(__name__)

CostFunction = Callable[[Diagnostic], int]


@dataclass(frozen=True, slots=True)
class Deadline:
    """Monotonic instant after which pulling must stop."""

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> Deadline:
        """Return a deadline ``seconds`` from now.

        Args:
            seconds: Time budget for the call.

        Returns:
            Deadline: Deadline anchored to :func:`time.monotonic`.
        """

        return cls(expires_at=time.monotonic() + seconds)

    def check(self) -> None:
        """Raise when the deadline has passed.

        Raises:
            DeadlineExceededError: If the current monotonic time is past the deadline.
        """

        if time.monotonic() > self.expires_at:
            raise DeadlineExceededError("deadline expired while pulling diagnostics")


def guard_deadline(diagnostics: Iterable[Diagnostic], deadline: Deadline | None) -> Iterator[Diagnostic]:
    """Check ``deadline`` before every pull from ``diagnostics``.

    Args:
        diagnostics: Upstream iterable.
        deadline: Optional deadline; ``None`` disables the check.

    Yields:
        Diagnostic: Items from ``diagnostics`` until the deadline expires.
    """

    if deadline is None:
        yield from diagnostics
        return
    iterator = iter(diagnostics)
    while True:
        deadline.check()
        try:
            item = next(iterator)
        except StopIteration:
            return
        yield item


@dataclass(slots=True)
class PriorityBuffer:
    """Two-lane accumulator emitting errors before warnings.

    Arrival order is preserved within each lane. Unknown severities share the
    warning lane.

    Attributes:
        capacity: Maximum number of diagnostics held at once.
        observed: Number of diagnostics accepted into the lanes.
        saturated: ``True`` when the source still had items once capacity was reached.
    """

    capacity: int
    observed: int = 0
    saturated: bool = False
    _errors: deque[Diagnostic] = field(default_factory=deque, repr=False)
    _warnings: deque[Diagnostic] = field(default_factory=deque, repr=False)

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError("capacity must be positive")

    def fill(self, diagnostics: Iterable[Diagnostic]) -> PriorityBuffer:
        """Pull from ``diagnostics`` until exhausted or full.

        Args:
            diagnostics: Filtered upstream iterable.

        Returns:
            PriorityBuffer: ``self`` for chaining.
        """

        for diagnostic in diagnostics:
            if self.observed >= self.capacity:
                self.saturated = True
                LOGGER.warning(
                    "priority buffer reached its capacity of %d; later diagnostics are not observed",
                    self.capacity,
                )
                break
            lane = self._errors if diagnostic.severity.is_error else self._warnings
            lane.append(diagnostic)
            self.observed += 1
        return self

    def drain(self) -> Iterator[Diagnostic]:
        """Yield buffered errors, then warnings, releasing each once emitted.

        Yields:
            Diagnostic: Diagnostics in priority order.
        """

        for lane in (self._errors, self._warnings):
            while lane:
                yield lane.popleft()


@dataclass(slots=True)
class BudgetLimiter:
    """Stop emission before a page exceeds its count or token budget.

    Attributes:
        cost: Cost function charged per emitted diagnostic.
        max_diagnostics: Optional ceiling on the number of emitted diagnostics.
        token_limit: Optional ceiling on the summed cost of emitted diagnostics.
        emitted: Number of diagnostics emitted so far.
        tokens: Summed cost of emitted diagnostics.
        truncation_reason: Budget that stopped emission, ``None`` while unconstrained.
    """

    cost: CostFunction
    max_diagnostics: int | None = None
    token_limit: int | None = None
    emitted: int = 0
    tokens: int = 0
    truncation_reason: TruncationReason | None = None

    @property
    def truncated(self) -> bool:
        """Return ``True`` once a budget rejected a pulled candidate."""

        return self.truncation_reason is not None

    def limit(self, candidates: Iterable[Diagnostic]) -> Iterator[Diagnostic]:
        """Yield candidates while both budgets hold.

        A candidate is only rejected after it has been pulled, so truncation is
        reported only when more diagnostics actually exist. When both budgets
        would be exceeded the count limit is reported.

        Args:
            candidates: Prioritised diagnostics.

        Yields:
            Diagnostic: Admitted diagnostics.
        """

        for candidate in candidates:
            if self.max_diagnostics is not None and self.emitted + 1 > self.max_diagnostics:
                self.truncation_reason = TruncationReason.MAX_DIAGNOSTICS_LIMIT
                return
            cost = self.cost(candidate)
            if self.token_limit is not None and self.tokens + cost > self.token_limit:
                self.truncation_reason = TruncationReason.TOKEN_LIMIT
                return
            self.emitted += 1
            self.tokens += cost
            yield candidate


__all__ = [
    "BudgetLimiter",
    "CostFunction",
    "Deadline",
    "PriorityBuffer",
    "guard_deadline",
]
