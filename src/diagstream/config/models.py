# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the diagnostic paging pipeline."""

from __future__ import annotations

from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.calibration import Calibration
from ..errors import DiagstreamError

DEFAULT_TOKEN_LIMIT: Final[int] = 25_000
DEFAULT_BUFFER_CAPACITY: Final[int] = 10_000
DEFAULT_MAX_DIAGNOSTICS_CEILING: Final[int] = 1_000
DEFAULT_COST_SAFETY_PERCENT: Final[int] = 140


class ConfigError(DiagstreamError):
    """Raised when configuration input is invalid."""


class PipelineSettings(BaseModel):
    """Tunables shared by every page request.

    Attributes:
        default_token_limit: Token budget applied when a request omits one.
        buffer_capacity: Maximum diagnostics held by the priority buffer.
        max_diagnostics_ceiling: Largest ``max_diagnostics`` a request may ask for.
        cost_safety_percent: Safety factor applied to token estimates, in percent.
        calibration: Content and length factors refining token estimates; accepts
            a preset name (``none``, ``balanced``, ``conservative``) or a table
            of per-mille factors.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    default_token_limit: int = Field(default=DEFAULT_TOKEN_LIMIT, ge=1)
    buffer_capacity: int = Field(default=DEFAULT_BUFFER_CAPACITY, ge=1)
    max_diagnostics_ceiling: int = Field(default=DEFAULT_MAX_DIAGNOSTICS_CEILING, ge=1)
    cost_safety_percent: int = Field(default=DEFAULT_COST_SAFETY_PERCENT, ge=100)
    calibration: Calibration = Field(default_factory=Calibration)

    @field_validator("calibration", mode="before")
    @classmethod
    def _resolve_preset(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Calibration.preset(value)
        return value

    @model_validator(mode="after")
    def _check_ceiling(self) -> PipelineSettings:
        """Ensure a full page always fits in the priority buffer."""

        if self.max_diagnostics_ceiling > self.buffer_capacity:
            raise ValueError("max_diagnostics_ceiling cannot exceed buffer_capacity")
        return self

    def to_dict(self) -> dict[str, Any]:
        """Return the settings as a plain mapping.

        Returns:
            dict[str, Any]: Field names mapped to their values.
        """

        return self.model_dump()


__all__ = ["ConfigError", "PipelineSettings"]
