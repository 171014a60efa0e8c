# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Stateless continuation cursors bound to the request that issued them.

A cursor carries the number of prioritised diagnostics already served plus a
fingerprint of the filter and budget it was issued for. The server keeps no
pagination state; presenting a cursor with a different request is rejected.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from itertools import islice
from typing import Final

from pydantic import BaseModel, ConfigDict, NonNegativeInt, ValidationError

from ..core.models import Diagnostic
from ..errors import InvalidCursorError
from .filtering import FilterSpec

CURSOR_VERSION: Final[int] = 1
FINGERPRINT_LENGTH: Final[int] = 16
MAX_CURSOR_LENGTH: Final[int] = 256
_ALTCHARS: Final[bytes] = b"-_"
_PADDING: Final[str] = "="


@dataclass(frozen=True, slots=True)
class BudgetSpec:
    """Per-page budgets; ``None`` leaves the corresponding budget unconstrained."""

    max_diagnostics: int | None = None
    token_limit: int | None = None


class Cursor(BaseModel):
    """Decoded continuation cursor."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version: int = CURSOR_VERSION
    skip_count: NonNegativeInt
    fingerprint: str


def fingerprint(filter_spec: FilterSpec, budget_spec: BudgetSpec) -> str:
    """Return the request fingerprint embedded in cursors.

    Args:
        filter_spec: Filter the cursor is valid for.
        budget_spec: Budgets the cursor is valid for.

    Returns:
        str: First sixteen hex digits of a SHA-256 over the canonical request JSON.
    """

    canonical = json.dumps(
        {
            "filter": {
                "severity_filter": filter_spec.severity_filter.value,
                "file_pattern": filter_spec.file_pattern,
            },
            "budget": {
                "max_diagnostics": budget_spec.max_diagnostics,
                "token_limit": budget_spec.token_limit,
            },
        },
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def encode_cursor(cursor: Cursor) -> str:
    """Serialise ``cursor`` into an opaque URL-safe token.

    Args:
        cursor: Cursor to encode.

    Returns:
        str: Unpadded base64url token.
    """

    raw = cursor.model_dump_json().encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip(_PADDING)


def decode_cursor(token: str) -> Cursor:
    """Parse a token produced by :func:`encode_cursor`.

    Args:
        token: Opaque cursor token supplied by the caller.

    Returns:
        Cursor: Decoded cursor.

    Raises:
        InvalidCursorError: If the token is malformed or uses another version.
    """

    if not token or len(token) > MAX_CURSOR_LENGTH:
        raise InvalidCursorError("cursor token is empty or too long")
    padded = token + _PADDING * (-len(token) % 4)
    try:
        raw = base64.b64decode(padded.encode("ascii"), altchars=_ALTCHARS, validate=True)
        cursor = Cursor.model_validate_json(raw)
    except (binascii.Error, UnicodeError, ValidationError) as exc:
        raise InvalidCursorError(f"malformed cursor token: {exc}") from exc
    if cursor.version != CURSOR_VERSION:
        raise InvalidCursorError(f"unsupported cursor version {cursor.version}")
    return cursor


def resolve_skip(token: str | None, expected_fingerprint: str, max_skip: int) -> int:
    """Return the number of prioritised diagnostics to skip for ``token``.

    Args:
        token: Cursor token from the previous page, ``None`` for the first page.
        expected_fingerprint: Fingerprint of the current request.
        max_skip: Largest skip count the priority buffer can honour.

    Returns:
        int: Skip count, zero when ``token`` is ``None``.

    Raises:
        InvalidCursorError: If the token is malformed, bound to another request,
            or skips beyond the buffer capacity.
    """

    if token is None:
        return 0
    cursor = decode_cursor(token)
    if cursor.fingerprint != expected_fingerprint:
        raise InvalidCursorError("cursor was issued for a different filter or budget")
    if cursor.skip_count > max_skip:
        raise InvalidCursorError(f"cursor skip count {cursor.skip_count} exceeds buffer capacity {max_skip}")
    return cursor.skip_count


def skip(diagnostics: Iterable[Diagnostic], count: int) -> Iterator[Diagnostic]:
    """Drop the first ``count`` prioritised diagnostics already served on earlier pages.

    Args:
        diagnostics: Prioritised iterable.
        count: Skip count resolved from the cursor.

    Returns:
        Iterator[Diagnostic]: Remaining diagnostics, pulled lazily.
    """

    return islice(diagnostics, count, None)


def next_cursor(request_fingerprint: str, previous_skip: int, returned: int) -> str:
    """Return the cursor token resuming after the current page.

    Args:
        request_fingerprint: Fingerprint of the current request.
        previous_skip: Skip count the current page started from.
        returned: Number of diagnostics emitted on the current page.

    Returns:
        str: Encoded cursor token.
    """

    return encode_cursor(Cursor(skip_count=previous_skip + returned, fingerprint=request_fingerprint))


__all__ = [
    "BudgetSpec",
    "CURSOR_VERSION",
    "Cursor",
    "decode_cursor",
    "encode_cursor",
    "fingerprint",
    "next_cursor",
    "resolve_skip",
    "skip",
]
