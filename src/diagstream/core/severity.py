# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final

from ..errors import InvalidFilterError


class Severity(str, Enum):
    """Severity levels reported by build tools.

    ``UNKNOWN`` captures any vocabulary the build tool emits beyond errors and
    warnings. Unknown diagnostics share the warning lane when prioritised.
    """

    ERROR = "error"
    WARNING = "warning"
    UNKNOWN = "unknown"

    @property
    def is_error(self) -> bool:
        """Return ``True`` when the severity belongs to the error lane.

        Returns:
            bool: ``True`` for :attr:`Severity.ERROR` only.
        """

        return self is Severity.ERROR


class SeverityFilter(str, Enum):
    """Severity selections accepted from callers."""

    ALL = "all"
    ERROR = "error"
    WARNING = "warning"

    def admits(self, severity: Severity) -> bool:
        """Return ``True`` when ``severity`` passes this selection.

        Args:
            severity: Severity of the candidate diagnostic.

        Returns:
            bool: ``True`` when the diagnostic should be admitted.
        """

        if self is SeverityFilter.ALL:
            return True
        return severity.value == self.value


_SEVERITY_ALIASES: Final[dict[str, Severity]] = {
    "error": Severity.ERROR,
    "err": Severity.ERROR,
    "fatal": Severity.ERROR,
    "warning": Severity.WARNING,
    "warn": Severity.WARNING,
}


def coerce_severity(value: Severity | str | None) -> Severity:
    """Return a :class:`Severity` enumeration value for ``value``.

    Args:
        value: Raw severity entry which may already be an enum, string, or ``None``.

    Returns:
        Severity: Coerced severity value, ``Severity.UNKNOWN`` when unrecognised.
    """

    if isinstance(value, Severity):
        return value
    if isinstance(value, str):
        return _SEVERITY_ALIASES.get(value.strip().lower(), Severity.UNKNOWN)
    return Severity.UNKNOWN


def parse_severity_filter(value: SeverityFilter | str | None) -> SeverityFilter:
    """Parse a caller supplied severity selection.

    Args:
        value: Selection token such as ``"error"``; ``None`` selects everything.

    Returns:
        SeverityFilter: Parsed selection.

    Raises:
        InvalidFilterError: If ``value`` is not one of ``all``, ``error`` or ``warning``.
    """

    if value is None:
        return SeverityFilter.ALL
    if isinstance(value, SeverityFilter):
        return value
    try:
        return SeverityFilter(value.strip().lower())
    except ValueError:
        raise InvalidFilterError(
            "severity_filter",
            f"invalid severity '{value}', expected: 'error', 'warning', or 'all'",
        ) from None


__all__ = ["Severity", "SeverityFilter", "coerce_severity", "parse_severity_filter"]
