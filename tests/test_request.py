# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for parsing loosely typed page requests."""

from __future__ import annotations

import pytest

from diagstream.errors import InvalidRequestError
from diagstream.interfaces.diagnostics import PageRequest


def test_from_mapping_accepts_known_fields() -> None:
    request = PageRequest.from_mapping(
        {"max_diagnostics": 20, "severity_filter": "error", "file_pattern": "src/**", "token_limit": 900},
    )

    assert request == PageRequest(max_diagnostics=20, severity_filter="error", file_pattern="src/**", token_limit=900)


def test_from_mapping_defaults_missing_fields() -> None:
    assert PageRequest.from_mapping({}) == PageRequest()


@pytest.mark.parametrize(
    ("payload", "field"),
    [
        ({"max_diagnostics": "5"}, "max_diagnostics"),
        ({"max_diagnostics": True}, "max_diagnostics"),
        ({"token_limit": 1.5}, "token_limit"),
        ({"cursor": 42}, "cursor"),
        ({"page": 2}, "page"),
    ],
)
def test_from_mapping_rejects_bad_payloads(payload: dict[str, object], field: str) -> None:
    with pytest.raises(InvalidRequestError) as excinfo:
        PageRequest.from_mapping(payload)

    assert excinfo.value.field == field
