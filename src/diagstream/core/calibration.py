# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Calibration factors refining the heuristic token estimate.

Estimates are adjusted by a factor for the length tier of the estimate, a
factor for the kind of content being priced and a global margin. Factors are
expressed in per-mille so that calibration stays in integer arithmetic. The
combined factor never drops below one, so a calibrated estimate is never
smaller than the estimate it refines.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

PER_MILLE: Final[int] = 1000
SHORT_TIER_LIMIT: Final[int] = 20
MEDIUM_TIER_LIMIT: Final[int] = 100
LONG_TIER_LIMIT: Final[int] = 500

_CODE_FILE_RE: Final[re.Pattern[str]] = re.compile(r"\.mli?\b")
_CODE_KEYWORD_RE: Final[re.Pattern[str]] = re.compile(r"\b(?:let|type|module)\b")
_ERROR_WORD_RE: Final[re.Pattern[str]] = re.compile(r"\b(?:error|warning|exception)\b")
_LOCATION_WORD_RE: Final[re.Pattern[str]] = re.compile(r"line|column|character")
_EXTENSION_RE: Final[re.Pattern[str]] = re.compile(r"\.[a-zA-Z]{1,4}$")


class ContentKind(str, Enum):
    """Broad content categories with distinct tokenizer behaviour."""

    CODE = "code"
    ERROR_MESSAGE = "error_message"
    FILE_PATH = "file_path"
    JSON_STRUCTURE = "json_structure"
    GENERIC = "generic"


class LengthTier(str, Enum):
    """Size bands of a raw token estimate."""

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"
    VERY_LONG = "very_long"


def classify_length(estimated_tokens: int) -> LengthTier:
    """Return the size band of ``estimated_tokens``.

    Args:
        estimated_tokens: Raw estimate before calibration.

    Returns:
        LengthTier: Band used to select the length factor.
    """

    if estimated_tokens < SHORT_TIER_LIMIT:
        return LengthTier.SHORT
    if estimated_tokens < MEDIUM_TIER_LIMIT:
        return LengthTier.MEDIUM
    if estimated_tokens < LONG_TIER_LIMIT:
        return LengthTier.LONG
    return LengthTier.VERY_LONG


def classify_content(text: str) -> ContentKind:
    """Return the content category of ``text``.

    Categories are checked in order: source code, error messages, file paths,
    then JSON-like structure.

    Args:
        text: Text being priced.

    Returns:
        ContentKind: First matching category, ``GENERIC`` when none applies.
    """

    lowered = text.lower()
    if _CODE_FILE_RE.search(text) or (
        "(" in text and ")" in text and _CODE_KEYWORD_RE.search(lowered) is not None
    ):
        return ContentKind.CODE
    if _ERROR_WORD_RE.search(lowered) or (":" in text and _LOCATION_WORD_RE.search(lowered) is not None):
        return ContentKind.ERROR_MESSAGE
    if "/" in text or "\\" in text or _EXTENSION_RE.search(text):
        return ContentKind.FILE_PATH
    if ("{" in text and "}" in text) or ("[" in text and "]" in text) or (":" in text and '"' in text):
        return ContentKind.JSON_STRUCTURE
    return ContentKind.GENERIC


class Calibration(BaseModel):
    """Per-mille adjustment factors applied to raw token estimates.

    The defaults leave estimates unchanged. Named presets are available via
    :meth:`preset`.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    short_text: int = Field(default=PER_MILLE, ge=1)
    medium_text: int = Field(default=PER_MILLE, ge=1)
    long_text: int = Field(default=PER_MILLE, ge=1)
    very_long_text: int = Field(default=PER_MILLE, ge=1)
    code: int = Field(default=PER_MILLE, ge=1)
    error_message: int = Field(default=PER_MILLE, ge=1)
    file_path: int = Field(default=PER_MILLE, ge=1)
    json_structure: int = Field(default=PER_MILLE, ge=1)
    conservative_margin: int = Field(default=PER_MILLE, ge=PER_MILLE)
    minimum_tokens: int = Field(default=1, ge=1)

    @classmethod
    def preset(cls, name: str) -> Calibration:
        """Return the named calibration preset.

        Args:
            name: One of ``none``, ``balanced`` or ``conservative`` (case-insensitive).

        Returns:
            Calibration: Preset factors.

        Raises:
            ValueError: If ``name`` is not a known preset.
        """

        try:
            return CALIBRATION_PRESETS[name.strip().lower()]
        except KeyError:
            choices = ", ".join(sorted(CALIBRATION_PRESETS))
            raise ValueError(f"unknown calibration preset {name!r} (expected one of: {choices})") from None

    def length_factor(self, tier: LengthTier) -> int:
        return {
            LengthTier.SHORT: self.short_text,
            LengthTier.MEDIUM: self.medium_text,
            LengthTier.LONG: self.long_text,
            LengthTier.VERY_LONG: self.very_long_text,
        }[tier]

    def content_factor(self, kind: ContentKind) -> int:
        return {
            ContentKind.CODE: self.code,
            ContentKind.ERROR_MESSAGE: self.error_message,
            ContentKind.FILE_PATH: self.file_path,
            ContentKind.JSON_STRUCTURE: self.json_structure,
            ContentKind.GENERIC: PER_MILLE,
        }[kind]

    def combined_factor(self, kind: ContentKind, tier: LengthTier) -> int:
        """Return the per-mille factor for ``kind`` and ``tier``, never below one.

        Args:
            kind: Content category of the priced text.
            tier: Size band of the raw estimate.

        Returns:
            int: Product of the length, content and margin factors, rounded up.
        """

        product = self.length_factor(tier) * self.content_factor(kind) * self.conservative_margin
        scale = PER_MILLE * PER_MILLE
        return max(PER_MILLE, -(-product // scale))

    def apply(self, estimate: int, text: str) -> int:
        """Return ``estimate`` adjusted for the content of ``text``.

        Args:
            estimate: Raw token estimate.
            text: Text used to classify the content.

        Returns:
            int: Calibrated estimate, rounded up and at least ``minimum_tokens``.
        """

        factor = self.combined_factor(classify_content(text), classify_length(estimate))
        return max(self.minimum_tokens, -(-estimate * factor // PER_MILLE))


CALIBRATION_PRESETS: Final[dict[str, Calibration]] = {
    "none": Calibration(),
    "balanced": Calibration(
        short_text=1000,
        medium_text=1050,
        long_text=1100,
        very_long_text=1150,
        code=950,
        error_message=1000,
        file_path=900,
        json_structure=1100,
        conservative_margin=1080,
    ),
    "conservative": Calibration(
        short_text=1100,
        medium_text=1150,
        long_text=1200,
        very_long_text=1250,
        code=1000,
        error_message=1050,
        file_path=1000,
        json_structure=1150,
        conservative_margin=1150,
    ),
}


__all__ = [
    "CALIBRATION_PRESETS",
    "Calibration",
    "ContentKind",
    "LengthTier",
    "PER_MILLE",
    "classify_content",
    "classify_length",
]
