# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field

import pytest

from diagstream.core.models import BuildProgress, Diagnostic
from diagstream.core.severity import Severity


def make_diagnostic(
    severity: Severity | str = Severity.ERROR,
    file: str = "src/main.ml",
    line: int = 1,
    column: int = 0,
    message: str = "Unbound value foo",
) -> Diagnostic:
    return Diagnostic(severity=severity, file=file, line=line, column=column, message=message)


@dataclass(slots=True)
class CountingSource:
    """Diagnostic source recording how many items were pulled."""

    items: Sequence[Diagnostic]
    build_progress: BuildProgress | None = None
    pulls: int = 0
    calls: int = field(default=0)

    def diagnostics(self) -> Iterator[Diagnostic]:
        self.calls += 1
        for item in self.items:
            self.pulls += 1
            yield item

    def progress(self) -> BuildProgress | None:
        return self.build_progress


@pytest.fixture
def diagnostic_factory() -> Callable[..., Diagnostic]:
    """Return the diagnostic builder used across pipeline tests."""
    return make_diagnostic


@pytest.fixture
def mixed_diagnostics() -> list[Diagnostic]:
    """Return ten diagnostics, four errors interleaved with six warnings."""
    severities = ["warning", "error", "warning", "warning", "error", "warning", "error", "warning", "warning", "error"]
    return [
        make_diagnostic(severity=severity, file=f"src/mod_{index}.ml", line=index + 1, message=f"issue {index}")
        for index, severity in enumerate(severities)
    ]


@pytest.fixture
def source_factory() -> Callable[..., CountingSource]:
    """Return a builder for sources that count pulls."""
    return CountingSource
