# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Composable pull pipeline turning a diagnostic source into budgeted pages."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from functools import partial

from ..config.models import PipelineSettings
from ..core.models import Diagnostic, Response, TruncationReason
from ..errors import InvalidRequestError
from ..interfaces.diagnostics import DiagnosticPager, DiagnosticSource, PageRequest
from .assembler import assemble_response
from .filtering import FilterSpec, compile_filter, filter_stream
from .pagination import BudgetSpec, fingerprint, next_cursor, resolve_skip, skip
from .stream import BudgetLimiter, Deadline, PriorityBuffer, guard_deadline
from .tokens import diagnostic_cost

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PipelineState:
    """Mutable bookkeeping owned by exactly one :meth:`DiagnosticPipeline.run` call.

    Attributes:
        buffer: Priority buffer holding filtered diagnostics.
        limiter: Budget limiter tracking emitted count and tokens.
        pulled: Diagnostics pulled from the source before filtering.
    """

    buffer: PriorityBuffer
    limiter: BudgetLimiter
    pulled: int = 0

    def count_pulls(self, diagnostics: Iterable[Diagnostic]) -> Iterator[Diagnostic]:
        """Yield ``diagnostics`` while counting every item pulled from the source.

        Args:
            diagnostics: Raw source iterable.

        Yields:
            Diagnostic: Items from ``diagnostics`` unchanged.
        """

        for diagnostic in diagnostics:
            self.pulled += 1
            yield diagnostic


@dataclass(slots=True)
class DiagnosticPipeline(DiagnosticPager):
    """Pipeline that filters, prioritises, paginates and budgets diagnostics.

    Attributes:
        settings: Shared tunables such as the buffer capacity and default budget.
    """

    settings: PipelineSettings = field(default_factory=PipelineSettings)

    @property
    def pipeline_name(self) -> str:
        """Return the identifier for this pipeline.

        Returns:
            str: Human-readable identifier for the pipeline implementation.
        """

        return "streaming"

    def budget_for(self, request: PageRequest) -> BudgetSpec:
        """Validate the request budgets and apply defaults.

        Args:
            request: Page request issued by the client.

        Returns:
            BudgetSpec: Effective budgets for the request.

        Raises:
            InvalidRequestError: If a budget is outside its accepted range.
        """

        ceiling = self.settings.max_diagnostics_ceiling
        max_diagnostics = request.max_diagnostics
        if max_diagnostics is not None:
            if max_diagnostics < 1:
                raise InvalidRequestError("max_diagnostics", f"must be >= 1, got {max_diagnostics}")
            if max_diagnostics > ceiling:
                raise InvalidRequestError("max_diagnostics", f"must be <= {ceiling}, got {max_diagnostics}")
        token_limit = request.token_limit if request.token_limit is not None else self.settings.default_token_limit
        if token_limit < 1:
            raise InvalidRequestError("token_limit", f"must be >= 1, got {token_limit}")
        return BudgetSpec(max_diagnostics=max_diagnostics, token_limit=token_limit)

    def run(self, request: PageRequest, source: DiagnosticSource, *, deadline: float | None = None) -> Response:
        """Produce one budgeted page from ``source``.

        The request is fully validated before the first pull, so invalid
        filters, budgets and cursors never touch the source.

        Args:
            request: Page request issued by the client.
            source: Source of diagnostics and build progress.
            deadline: Optional :func:`time.monotonic` instant after which pulling stops.

        Returns:
            Response: Budgeted page with summary and continuation metadata.

        Raises:
            InvalidFilterError: If the severity selection or file pattern is invalid.
            InvalidRequestError: If a budget is outside its accepted range.
            InvalidCursorError: If the cursor is malformed or bound to another request.
            SourceUnavailableError: If the source cannot be read.
            DeadlineExceededError: If ``deadline`` passes while pulling.
        """

        filter_spec = FilterSpec.from_raw(request.severity_filter, request.file_pattern)
        predicate = compile_filter(filter_spec)
        budget = self.budget_for(request)
        request_fingerprint = fingerprint(filter_spec, budget)
        skip_count = resolve_skip(request.cursor, request_fingerprint, self.settings.buffer_capacity)

        state = PipelineState(
            buffer=PriorityBuffer(capacity=self.settings.buffer_capacity),
            limiter=BudgetLimiter(
                cost=partial(
                    diagnostic_cost,
                    safety_percent=self.settings.cost_safety_percent,
                    calibration=self.settings.calibration,
                ),
                max_diagnostics=budget.max_diagnostics,
                token_limit=budget.token_limit,
            ),
        )
        guard = Deadline(deadline) if deadline is not None else None
        pulls = state.count_pulls(guard_deadline(source.diagnostics(), guard))
        state.buffer.fill(filter_stream(predicate, pulls))
        emitted = list(state.limiter.limit(skip(state.buffer.drain(), skip_count)))
        progress = source.progress()

        cursor: str | None = None
        if state.limiter.truncated and emitted:
            cursor = next_cursor(request_fingerprint, skip_count, len(emitted))
        elif state.limiter.truncation_reason is TruncationReason.TOKEN_LIMIT:
            LOGGER.warning(
                "next diagnostic alone exceeds token_limit=%s; no continuation cursor issued",
                budget.token_limit,
            )

        LOGGER.debug(
            "page served: pulled=%d observed=%d skipped=%d returned=%d tokens=%d reason=%s",
            state.pulled,
            state.buffer.observed,
            skip_count,
            len(emitted),
            state.limiter.tokens,
            state.limiter.truncation_reason,
        )
        return assemble_response(
            emitted,
            total_observed=state.buffer.observed,
            token_count=state.limiter.tokens,
            truncation_reason=state.limiter.truncation_reason,
            next_cursor=cursor,
            progress=progress,
            saw_diagnostics=state.pulled > 0,
        )


__all__ = ["DiagnosticPipeline", "PipelineState"]
