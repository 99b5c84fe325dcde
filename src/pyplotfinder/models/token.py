"""Decoded marker token models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from pyplotfinder.models.geo import Coordinates


class DecodedToken(BaseModel):
    """Outcome of :func:`pyplotfinder.tokens.parser.parse_token`.

    ``coordinates`` is ``None`` when no known encoding carried a
    position; ``payload`` is ``None`` unless the token was a JSON object.
    """

    model_config = ConfigDict(frozen=True)

    coordinates: Coordinates | None = None
    payload: dict[str, Any] | None = None
    raw: str = ""

    @property
    def has_coordinates(self) -> bool:
        return self.coordinates is not None and self.coordinates.is_valid


class DisplayEntry(BaseModel):
    """One human-readable row of a token payload."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    value: str
