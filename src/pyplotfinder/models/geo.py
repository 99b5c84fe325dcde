"""Coordinate model."""

from __future__ import annotations

import math

from pyplotfinder.models._base import PlotFinderBaseModel


class Coordinates(PlotFinderBaseModel):
    """A WGS84 position in degrees.

    The model accepts any float; consumers check :attr:`is_valid`
    before handing a position to the routing engine.
    """

    lat: float
    lng: float

    @property
    def is_valid(self) -> bool:
        """Both components finite and inside [-90, 90] / [-180, 180]."""
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            return False
        return -90.0 <= self.lat <= 90.0 and -180.0 <= self.lng <= 180.0

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)
