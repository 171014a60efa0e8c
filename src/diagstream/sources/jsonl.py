# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Diagnostic source reading one JSON object per line."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from ..core.models import BuildProgress, Diagnostic
from ..errors import SourceUnavailableError
from ..interfaces.diagnostics import DiagnosticSource

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JsonLinesSource(DiagnosticSource):
    """Lazily stream diagnostics from a JSON Lines file.

    Each non-blank line holds an object with ``severity``, ``file``, ``line``,
    ``column`` and ``message`` keys. Lines are parsed only when pulled, so a
    page that stops early never reads the rest of the file.

    Attributes:
        path: File containing the diagnostics.
        build_progress: Progress snapshot returned by :meth:`progress`.
    """

    path: Path
    build_progress: BuildProgress | None = None

    def diagnostics(self) -> Iterator[Diagnostic]:
        """Yield diagnostics line by line.

        Yields:
            Diagnostic: Parsed diagnostics in file order.

        Raises:
            SourceUnavailableError: If the file cannot be read or a line is malformed.
        """

        try:
            handle = self.path.open(encoding="utf-8")
        except OSError as exc:
            raise SourceUnavailableError(f"cannot open diagnostics file {self.path}: {exc}") from exc
        LOGGER.debug("streaming diagnostics from %s", self.path)
        with handle:
            try:
                for lineno, line in enumerate(handle, start=1):
                    if not line.strip():
                        continue
                    yield self._parse(line, lineno)
            except (OSError, UnicodeDecodeError) as exc:
                raise SourceUnavailableError(f"failed reading {self.path}: {exc}") from exc

    def _parse(self, line: str, lineno: int) -> Diagnostic:
        try:
            return Diagnostic.model_validate(json.loads(line))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise SourceUnavailableError(f"{self.path}:{lineno}: malformed diagnostic: {exc}") from exc

    def progress(self) -> BuildProgress | None:
        return self.build_progress


__all__ = ["JsonLinesSource"]
