"""Base model shared by pyplotfinder data types.

Every model is frozen: records, decoded tokens and samples are created
once and never mutated afterwards.  :class:`PlotFinderBaseModel` also
drops empty placeholders (``None``, ``""``, NaN) before validation so
field defaults apply, and stashes the original mapping in ``raw`` for
models that declare that field.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class PlotFinderBaseModel(BaseModel):
    """Frozen base model with placeholder cleaning."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_placeholders(cls, values: Any) -> Any:
        """Strip placeholders and stash the raw payload when the model has ``raw``."""
        if not isinstance(values, dict):
            return values
        cleaned = PlotFinderBaseModel._clean_dict(values)
        if "raw" in cls.model_fields and "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
