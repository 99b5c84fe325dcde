"""Routing request/response models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from pyplotfinder.models.geo import Coordinates


class RouteRequest(BaseModel):
    """An ordered origin/destination pair sent to the routing engine.

    ``outside_radius`` records whether the origin had to fall back to
    the reference point.
    """

    model_config = ConfigDict(frozen=True)

    origin: Coordinates
    destination: Coordinates
    outside_radius: bool = False

    @property
    def waypoints(self) -> list[Coordinates]:
        return [self.origin, self.destination]


class RouteResult(BaseModel):
    """Path returned by the routing engine.

    Parameters
    ----------
    distance_m : float
        Route length in meters.
    duration_s : float
        Estimated travel time in seconds.
    path : tuple of Coordinates
        Route geometry, origin first.
    bounds : tuple of Coordinates or None
        South-west and north-east corners of ``path``.
    """

    model_config = ConfigDict(frozen=True)

    distance_m: float
    duration_s: float
    path: tuple[Coordinates, ...] = ()
    bounds: tuple[Coordinates, Coordinates] | None = None

    @staticmethod
    def bounds_of(path: tuple[Coordinates, ...] | list[Coordinates]) -> tuple[Coordinates, Coordinates] | None:
        if not path:
            return None
        lats = [point.lat for point in path]
        lngs = [point.lng for point in path]
        return (
            Coordinates(lat=min(lats), lng=min(lngs)),
            Coordinates(lat=max(lats), lng=max(lngs)),
        )


class RouteUpdate(BaseModel):
    """Delivered to coordinator listeners when a route is found."""

    model_config = ConfigDict(frozen=True)

    request: RouteRequest
    result: RouteResult

    @property
    def outside_radius(self) -> bool:
        return self.request.outside_radius
