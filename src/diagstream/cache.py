# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Bounded memoization for pure single-argument helpers.

The token estimator is called once per field of every diagnostic that reaches
the budget limiter. Messages repeat heavily across a build, so estimates are
memoized, but the memo is capped so that it never grows with the input. An
optional admission predicate keeps large keys out of the memo entirely.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from functools import update_wrapper
from threading import Lock
from typing import Final, Generic, TypeVar

K = TypeVar("K", bound=Hashable)
R = TypeVar("R")

DEFAULT_MAXSIZE: Final[int] = 2048


@dataclass(frozen=True, slots=True)
class CacheInfo:
    """Describe memo state.

    Attributes:
        current_size: Number of cached entries currently stored.
        hits: Number of lookups served from the memo.
        misses: Number of lookups that invoked the wrapped callable.
        maxsize: Configured maximum capacity.
    """

    current_size: int
    hits: int
    misses: int
    maxsize: int


class BoundedMemo(Generic[K, R]):
    """Least-recently-used memo around a pure single-argument callable."""

    def __init__(
        self,
        func: Callable[[K], R],
        maxsize: int = DEFAULT_MAXSIZE,
        admit: Callable[[K], bool] | None = None,
    ) -> None:
        """Wrap ``func`` with an LRU memo holding at most ``maxsize`` results.

        Args:
            func: Pure callable whose results may be reused.
            maxsize: Maximum number of retained results; must be positive.
            admit: Optional predicate; keys it rejects are computed but never stored.

        Raises:
            ValueError: If ``maxsize`` is not positive.
        """

        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self._func = func
        self._maxsize = maxsize
        self._admit = admit
        self._store: OrderedDict[K, R] = OrderedDict()
        self._lock = Lock()
        self._hits = 0
        self._misses = 0
        update_wrapper(self, func)

    def __call__(self, key: K) -> R:
        if self._admit is not None and not self._admit(key):
            return self._func(key)
        with self._lock:
            if key in self._store:
                self._store.move_to_end(key)
                self._hits += 1
                return self._store[key]
        result = self._func(key)
        with self._lock:
            self._misses += 1
            self._store[key] = result
            if len(self._store) > self._maxsize:
                self._store.popitem(last=False)
        return result

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def cache_clear(self) -> None:
        """Drop every cached result and reset counters."""

        with self._lock:
            self._store.clear()
            self._hits = 0
            self._misses = 0

    def cache_info(self) -> CacheInfo:
        """Return the current memo statistics.

        Returns:
            CacheInfo: Snapshot of size, hit and miss counters.
        """

        with self._lock:
            return CacheInfo(
                current_size=len(self._store),
                hits=self._hits,
                misses=self._misses,
                maxsize=self._maxsize,
            )


def bounded_memo(
    maxsize: int = DEFAULT_MAXSIZE,
    admit: Callable[[K], bool] | None = None,
) -> Callable[[Callable[[K], R]], BoundedMemo[K, R]]:
    """Return a decorator applying :class:`BoundedMemo`.

    Args:
        maxsize: Maximum number of retained results.
        admit: Optional predicate selecting which keys may be stored.

    Returns:
        Callable: Decorator wrapping a single-argument callable.
    """

    def decorate(func: Callable[[K], R]) -> BoundedMemo[K, R]:
        return BoundedMemo(func, maxsize, admit)

    return decorate


__all__: Final = ["BoundedMemo", "CacheInfo", "bounded_memo"]
