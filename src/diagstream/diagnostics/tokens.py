# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Deterministic token cost model for diagnostics and responses.

The model approximates how a language-model tokenizer splits compiler output.
It is intentionally pessimistic: every estimate is scaled by a safety factor
and rounded up, so the sum of costs over a page bounds the real token usage of
the serialized diagnostics. Only integer arithmetic is used; the same input
always yields the same cost on every platform. Lengths are measured in UTF-8
bytes, which is what byte-level tokenizers consume, so multi-byte text is
priced by its encoded size rather than its character count.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Final

from ..cache import bounded_memo
from ..core.calibration import Calibration
from ..errors import CostEstimationError

if TYPE_CHECKING:
    from ..core.models import Diagnostic, Response

DEFAULT_SAFETY_PERCENT: Final[int] = 140
_PERCENT: Final[int] = 100
_SHORT_WORD: Final[int] = 2
_COMMON_WORD: Final[int] = 6
_MEDIUM_WORD: Final[int] = 12
_CHARS_PER_LONG_TOKEN: Final[int] = 6
_NON_ASCII_PER_TOKEN: Final[int] = 4
_ASCII_LIMIT: Final[int] = 127
MEMO_TEXT_LIMIT: Final[int] = 256
_SMALL_NUMBER: Final[int] = 100
_OBJECT_BRACES: Final[int] = 3
_ROOT_OBJECT_OVERHEAD: Final[int] = 10

# Compiler and build-tool vocabulary with measured token counts.
_KNOWN_TERMS: Final[dict[str, int]] = {
    "error": 1,
    "warning": 1,
    "unbound": 2,
    "module": 1,
    "expected": 1,
    "found": 1,
    "type": 1,
    "mismatch": 2,
    "syntax": 1,
    "parse": 1,
    "compile": 1,
    "build": 1,
    "interface": 2,
    "signature": 2,
    "undefined": 2,
    "variable": 2,
    "function": 1,
    "value": 1,
    "constructor": 2,
    "field": 1,
    "record": 1,
    "variant": 1,
    "match": 1,
    "pattern": 1,
    "exhaustive": 2,
    "unused": 1,
    "deprecated": 2,
    "at": 1,
    "line": 1,
    "column": 1,
    "character": 2,
    "characters": 2,
    "in": 1,
    "file": 1,
    "from": 1,
    "to": 1,
    "src/": 1,
    "lib/": 1,
    "bin/": 1,
    "test/": 1,
    "tests/": 1,
    "this expression": 2,
    "the type": 2,
    "is not": 2,
    "cannot be": 3,
    "should be": 2,
    "must be": 2,
}


class JsonKind(str, Enum):
    """JSON value shapes used when pricing serialized fields."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


_KIND_OVERHEAD: Final[dict[JsonKind, int]] = {
    JsonKind.STRING: 2,
    JsonKind.NUMBER: 0,
    JsonKind.BOOLEAN: 0,
    JsonKind.ARRAY: 2,
    JsonKind.OBJECT: 3,
}


def _word_tokens(word: str) -> int:
    """Return the estimated token count of a single whitespace-free word."""

    known = _KNOWN_TERMS.get(word.lower())
    if known is not None:
        return known
    length = len(_utf8(word))
    if length <= _SHORT_WORD:
        return 1
    if "." in word:
        return len(word.split("."))
    if "/" in word:
        return max(1, len(word.split("/")) - 1)
    if length <= _COMMON_WORD:
        return 1
    if length <= _MEDIUM_WORD:
        return 2
    return -(-length // _CHARS_PER_LONG_TOKEN)


def _utf8(text: str) -> bytes:
    # Lone surrogates survive JSON decoding; price them as their three-byte form.
    return text.encode("utf-8", "surrogatepass")


def _memoizable(text: str) -> bool:
    return len(text) <= MEMO_TEXT_LIMIT


@bounded_memo(maxsize=2048, admit=_memoizable)
def estimate_text_tokens(text: str) -> int:
    """Estimate the tokens a tokenizer spends on ``text``.

    Only texts up to ``MEMO_TEXT_LIMIT`` characters are memoized, so long
    messages are not kept alive after their diagnostic has been emitted.

    Args:
        text: Free-form text such as a message or a file path.

    Returns:
        int: Estimated token count, never less than one. Word lengths and the
        surcharge of one token per four non-ASCII bytes are measured on the
        UTF-8 encoding.
    """

    if not text:
        return 1
    known = _KNOWN_TERMS.get(text.lower())
    if known is not None:
        return known
    words = sum(_word_tokens(word) for word in text.split())
    non_ascii = sum(1 for byte in _utf8(text) if byte > _ASCII_LIMIT)
    return max(1, words + non_ascii // _NON_ASCII_PER_TOKEN)


def estimate_number_tokens(value: int) -> int:
    """Estimate the tokens spent on a serialized integer.

    Args:
        value: Integer rendered in decimal.

    Returns:
        int: One token below one hundred, otherwise one less than the digit count.
    """

    if 0 <= value < _SMALL_NUMBER:
        return 1
    return max(1, len(str(abs(value))) - 1)


def estimate_json_field_overhead(field_name: str, kind: JsonKind) -> int:
    """Return the structural tokens of one JSON member.

    Args:
        field_name: Member name rendered as a quoted key.
        kind: Shape of the member value.

    Returns:
        int: Tokens spent on the key, the value delimiters and the separators.
    """

    name_tokens = (len(field_name) + 3) // 4
    return name_tokens + _KIND_OVERHEAD[kind] + 1


_DIAGNOSTIC_OVERHEAD: Final[int] = (
    estimate_json_field_overhead("severity", JsonKind.STRING)
    + estimate_json_field_overhead("file", JsonKind.STRING)
    + estimate_json_field_overhead("line", JsonKind.NUMBER)
    + estimate_json_field_overhead("column", JsonKind.NUMBER)
    + estimate_json_field_overhead("message", JsonKind.STRING)
    + _OBJECT_BRACES
)


def estimate_diagnostic_tokens(diagnostic: Diagnostic) -> int:
    """Estimate the unscaled tokens of a serialized diagnostic object.

    Args:
        diagnostic: Diagnostic priced as a JSON object.

    Returns:
        int: Field content plus JSON structure estimate.
    """

    return (
        estimate_text_tokens(diagnostic.severity.value)
        + estimate_text_tokens(diagnostic.file)
        + estimate_number_tokens(diagnostic.line)
        + estimate_number_tokens(diagnostic.column)
        + estimate_text_tokens(diagnostic.message)
        + _DIAGNOSTIC_OVERHEAD
    )


def diagnostic_cost(
    diagnostic: Diagnostic,
    *,
    safety_percent: int = DEFAULT_SAFETY_PERCENT,
    calibration: Calibration | None = None,
) -> int:
    """Return the budget cost charged for emitting ``diagnostic``.

    Args:
        diagnostic: Diagnostic about to be admitted onto a page.
        safety_percent: Multiplier applied to the estimate, in percent.
        calibration: Optional factors applied to the estimate first, keyed on
            the content of the diagnostic message.

    Returns:
        int: Calibrated estimate scaled by ``safety_percent`` and rounded up.

    Raises:
        CostEstimationError: If ``safety_percent`` would make the estimate optimistic.
    """

    if safety_percent < _PERCENT:
        raise CostEstimationError(f"safety_percent must be at least {_PERCENT}, got {safety_percent}")
    raw = estimate_diagnostic_tokens(diagnostic)
    if calibration is not None:
        raw = calibration.apply(raw, diagnostic.message)
    return -(-raw * safety_percent // _PERCENT)


def estimate_response_tokens(response: Response) -> int:
    """Estimate the tokens of a whole serialized response envelope.

    Unlike :func:`diagnostic_cost` this prices the metadata as well and applies
    no safety factor. It is informational and never used for budgeting.

    Args:
        response: Response to price.

    Returns:
        int: Estimated token count of the serialized response.
    """

    diagnostics = sum(estimate_diagnostic_tokens(diag) for diag in response.diagnostics)
    diagnostics += estimate_json_field_overhead("diagnostics", JsonKind.ARRAY) + len(response.diagnostics)
    status = estimate_text_tokens(response.status) + estimate_json_field_overhead("status", JsonKind.STRING)
    truncated = 1 + estimate_json_field_overhead("truncated", JsonKind.BOOLEAN)
    reason_value = response.truncation_reason.value if response.truncation_reason else None
    reason = (estimate_text_tokens(reason_value) if reason_value else 1) + estimate_json_field_overhead(
        "truncation_reason",
        JsonKind.STRING,
    )
    cursor = (estimate_text_tokens(response.next_cursor) if response.next_cursor else 1) + estimate_json_field_overhead(
        "next_cursor",
        JsonKind.STRING,
    )
    token_count = estimate_number_tokens(response.token_count) + estimate_json_field_overhead(
        "token_count",
        JsonKind.NUMBER,
    )

    summary = response.summary
    summary_tokens = sum(
        estimate_number_tokens(value) + estimate_json_field_overhead(name, JsonKind.NUMBER)
        for name, value in (
            ("total_diagnostics", summary.total_diagnostics),
            ("returned_diagnostics", summary.returned_diagnostics),
            ("error_count", summary.error_count),
            ("warning_count", summary.warning_count),
        )
    )
    progress = summary.build_summary
    if progress is None:
        summary_tokens += 1 + estimate_json_field_overhead("build_summary", JsonKind.OBJECT)
    else:
        summary_tokens += estimate_text_tokens(progress.state.value) + estimate_json_field_overhead(
            "state",
            JsonKind.STRING,
        )
        for name in ("complete", "remaining", "failed"):
            value = getattr(progress, name)
            summary_tokens += (1 if value is None else estimate_number_tokens(value)) + estimate_json_field_overhead(
                name,
                JsonKind.NUMBER,
            )
        summary_tokens += estimate_json_field_overhead("build_summary", JsonKind.OBJECT) + _OBJECT_BRACES
    summary_tokens += estimate_json_field_overhead("summary", JsonKind.OBJECT) + _OBJECT_BRACES

    return diagnostics + status + truncated + reason + cursor + token_count + summary_tokens + _ROOT_OBJECT_OVERHEAD


__all__ = [
    "DEFAULT_SAFETY_PERCENT",
    "JsonKind",
    "MEMO_TEXT_LIMIT",
    "diagnostic_cost",
    "estimate_diagnostic_tokens",
    "estimate_json_field_overhead",
    "estimate_number_tokens",
    "estimate_response_tokens",
    "estimate_text_tokens",
]
