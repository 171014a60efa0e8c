# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Protocols and request bundles describing diagnostic paging."""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Final, Protocol, runtime_checkable

from ..core.models import BuildProgress, Diagnostic, Response
from ..errors import InvalidRequestError

_INT_FIELDS: Final[tuple[str, ...]] = ("max_diagnostics", "token_limit")
_STR_FIELDS: Final[tuple[str, ...]] = ("cursor", "severity_filter", "file_pattern")


@dataclass(frozen=True, slots=True)
class PageRequest:
    """Represent one page request issued by a client.

    ``None`` fields fall back to the pipeline defaults: no count limit, the
    configured token limit, every severity and every file.
    """

    max_diagnostics: int | None = None
    cursor: str | None = None
    severity_filter: str | None = None
    file_pattern: str | None = None
    token_limit: int | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> PageRequest:
        """Build a request from a loosely typed payload such as decoded JSON.

        Args:
            payload: Mapping of request field names to values.

        Returns:
            PageRequest: Parsed request. Ranges are checked by the pipeline.

        Raises:
            InvalidRequestError: If a field is unknown or carries the wrong type.
        """

        known = set(_INT_FIELDS) | set(_STR_FIELDS)
        for key in payload:
            if key not in known:
                raise InvalidRequestError(str(key), "unknown request field")
        values: dict[str, int | str | None] = {}
        for name in _INT_FIELDS:
            value = payload.get(name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise InvalidRequestError(name, f"expected an integer, got {type(value).__name__}")
            values[name] = value
        for name in _STR_FIELDS:
            value = payload.get(name)
            if value is not None and not isinstance(value, str):
                raise InvalidRequestError(name, f"expected a string, got {type(value).__name__}")
            values[name] = value
        return cls(**values)  # type: ignore[arg-type]


@runtime_checkable
class DiagnosticSource(Protocol):
    """Provide a lazy diagnostic stream together with build progress."""

    @abstractmethod
    def diagnostics(self) -> Iterator[Diagnostic]:
        """Return a fresh iterator over the current diagnostics.

        Returns:
            Iterator[Diagnostic]: Lazily produced diagnostics in source order.

        Raises:
            SourceUnavailableError: If the diagnostics cannot be read.
        """
        raise NotImplementedError

    @abstractmethod
    def progress(self) -> BuildProgress | None:
        """Return the current build progress snapshot.

        Returns:
            BuildProgress | None: Progress snapshot, ``None`` when unavailable.

        Raises:
            SourceUnavailableError: If the progress cannot be read.
        """
        raise NotImplementedError


@runtime_checkable
class DiagnosticPager(Protocol):
    """Turn a diagnostic source into budgeted pages."""

    @property
    @abstractmethod
    def pipeline_name(self) -> str:
        """Return the identifier of the pager implementation.

        Returns:
            str: Identifier describing the implementation.
        """
        raise NotImplementedError

    @abstractmethod
    def run(self, request: PageRequest, source: DiagnosticSource, *, deadline: float | None = None) -> Response:
        """Produce one budgeted page.

        Args:
            request: Page request issued by the client.
            source: Source of diagnostics and build progress.
            deadline: Optional :func:`time.monotonic` instant after which pulling stops.

        Returns:
            Response: Budgeted page with summary and continuation metadata.
        """
        raise NotImplementedError


__all__ = ["DiagnosticPager", "DiagnosticSource", "PageRequest"]
