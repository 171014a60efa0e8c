# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""In-memory diagnostic source."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from ..core.models import BuildProgress, Diagnostic
from ..interfaces.diagnostics import DiagnosticSource


@dataclass(slots=True)
class SnapshotSource(DiagnosticSource):
    """Serve a fixed diagnostic snapshot, re-enumerable across calls.

    Attributes:
        items: Diagnostics in the order the build tool reported them.
        build_progress: Progress snapshot returned by :meth:`progress`.
    """

    items: tuple[Diagnostic, ...] = field(default=())
    build_progress: BuildProgress | None = None

    @classmethod
    def of(cls, diagnostics: Iterable[Diagnostic], progress: BuildProgress | None = None) -> SnapshotSource:
        """Return a snapshot holding ``diagnostics``.

        Args:
            diagnostics: Diagnostics to serve.
            progress: Optional build progress snapshot.

        Returns:
            SnapshotSource: Source over a frozen copy of ``diagnostics``.
        """

        return cls(items=tuple(diagnostics), build_progress=progress)

    def diagnostics(self) -> Iterator[Diagnostic]:
        return iter(self.items)

    def progress(self) -> BuildProgress | None:
        return self.build_progress


__all__ = ["SnapshotSource"]
