# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the bounded memo used by the token estimator."""

from __future__ import annotations

import pytest

from diagstream.cache import BoundedMemo, bounded_memo


def test_bounded_memo_evicts_least_recently_used() -> None:
    calls: list[str] = []

    @bounded_memo(maxsize=2)
    def length(text: str) -> int:
        calls.append(text)
        return len(text)

    assert length("a") == 1
    assert length("bb") == 2
    assert length("a") == 1
    assert length("ccc") == 3
    assert length("bb") == 2

    assert calls == ["a", "bb", "ccc", "bb"]
    info = length.cache_info()
    assert info.current_size == 2
    assert info.hits == 1
    assert info.misses == 4


def test_cache_clear_resets_counters() -> None:
    memo = BoundedMemo(len, maxsize=4)
    memo("abc")
    memo("abc")

    memo.cache_clear()

    assert memo.cache_info().current_size == 0
    assert memo.cache_info().hits == 0


def test_bounded_memo_requires_positive_size() -> None:
    with pytest.raises(ValueError):
        BoundedMemo(len, maxsize=0)


def test_rejected_keys_are_computed_but_not_stored() -> None:
    calls: list[str] = []

    @bounded_memo(maxsize=8, admit=lambda text: len(text) <= 3)
    def length(text: str) -> int:
        calls.append(text)
        return len(text)

    assert length("abcdef") == 6
    assert length("abcdef") == 6
    assert length("abc") == 3
    assert length("abc") == 3

    assert calls == ["abcdef", "abcdef", "abc"]
    assert "abcdef" not in length
    assert "abc" in length
    assert length.cache_info().current_size == 1
