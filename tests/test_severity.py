# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for severity coercion and severity filters."""

from __future__ import annotations

import pytest

from diagstream.core.severity import Severity, SeverityFilter, coerce_severity, parse_severity_filter
from diagstream.errors import InvalidFilterError


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("error", Severity.ERROR),
        ("ERROR", Severity.ERROR),
        (" fatal ", Severity.ERROR),
        ("warn", Severity.WARNING),
        ("Warning", Severity.WARNING),
        ("alert", Severity.UNKNOWN),
        ("note", Severity.UNKNOWN),
        (None, Severity.UNKNOWN),
        (Severity.WARNING, Severity.WARNING),
    ],
)
def test_coerce_severity(raw: Severity | str | None, expected: Severity) -> None:
    assert coerce_severity(raw) is expected


def test_parse_severity_filter_is_case_insensitive() -> None:
    assert parse_severity_filter(None) is SeverityFilter.ALL
    assert parse_severity_filter("ERROR") is SeverityFilter.ERROR
    assert parse_severity_filter(" warning ") is SeverityFilter.WARNING


def test_parse_severity_filter_rejects_unknown_tokens() -> None:
    with pytest.raises(InvalidFilterError) as excinfo:
        parse_severity_filter("critical")

    assert excinfo.value.field == "severity_filter"
    assert "critical" in str(excinfo.value)


def test_unknown_severity_only_passes_all_filter() -> None:
    assert SeverityFilter.ALL.admits(Severity.UNKNOWN)
    assert not SeverityFilter.WARNING.admits(Severity.UNKNOWN)
    assert not SeverityFilter.ERROR.admits(Severity.UNKNOWN)
    assert SeverityFilter.ERROR.admits(Severity.ERROR)
    assert not SeverityFilter.ERROR.admits(Severity.WARNING)
