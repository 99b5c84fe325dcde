"""OSRM routing engine adapter.

OSRM takes coordinates as ``lng,lat`` pairs joined with ``;`` and
answers with ``{"code": "Ok", "routes": [...]}``.  Any other code is a
routing failure (``NoRoute``, ``InvalidQuery``, ...).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from pyplotfinder._constants import OSRM_BASE_URL, OSRM_PROFILE
from pyplotfinder._transport import Transport
from pyplotfinder.exceptions import RoutingError
from pyplotfinder.ingestion.normalize import safe_float
from pyplotfinder.models.geo import Coordinates
from pyplotfinder.models.route import RouteResult

_logger = logging.getLogger(__name__)


class RoutingEngine(Protocol):
    """External service turning an ordered waypoint list into a path."""

    async def route(self, waypoints: Sequence[Coordinates]) -> RouteResult: ...


def format_waypoints(waypoints: Sequence[Coordinates]) -> str:
    """``lng,lat;lng,lat`` as OSRM expects."""
    return ";".join(f"{point.lng:.6f},{point.lat:.6f}" for point in waypoints)


def parse_route_response(body: Any) -> RouteResult:
    """Convert an OSRM ``/route`` response into a :class:`RouteResult`."""
    if not isinstance(body, dict):
        raise RoutingError("Routing response is not a JSON object")
    code = str(body.get("code", ""))
    if code != "Ok":
        raise RoutingError(f"Routing failed: code={code} message={body.get('message', '')}", code=code)
    routes = body.get("routes")
    if not isinstance(routes, list) or not routes or not isinstance(routes[0], dict):
        raise RoutingError("Routing response has no routes", code="NoRoute")

    best = routes[0]
    path: list[Coordinates] = []
    geometry = best.get("geometry")
    if isinstance(geometry, dict):
        for pair in geometry.get("coordinates") or []:
            if not isinstance(pair, (list, tuple)) or len(pair) < 2:
                continue
            lng = safe_float(pair[0])
            lat = safe_float(pair[1])
            if lat is not None and lng is not None:
                path.append(Coordinates(lat=lat, lng=lng))

    return RouteResult(
        distance_m=safe_float(best.get("distance")) or 0.0,
        duration_s=safe_float(best.get("duration")) or 0.0,
        path=tuple(path),
        bounds=RouteResult.bounds_of(path),
    )


class OsrmRoutingEngine:
    """Routes over an OSRM HTTP service.

    Parameters
    ----------
    transport : Transport
        JSON transport used for the request.
    base_url : str
        Service root, without trailing slash.
    profile : str
        OSRM profile name.
    """

    def __init__(self, transport: Transport, *, base_url: str = OSRM_BASE_URL, profile: str = OSRM_PROFILE) -> None:
        self._transport = transport
        self._base_url = base_url.rstrip("/")
        self._profile = profile

    def build_url(self, waypoints: Sequence[Coordinates]) -> str:
        return f"{self._base_url}/route/v1/{self._profile}/{format_waypoints(waypoints)}"

    async def route(self, waypoints: Sequence[Coordinates]) -> RouteResult:
        if len(waypoints) < 2:
            raise RoutingError("At least two waypoints are required", code="InvalidQuery")
        url = self.build_url(waypoints)
        body = await self._transport.get_json(url, {"overview": "full", "geometries": "geojson"})
        result = parse_route_response(body)
        _logger.debug("Route found distance=%.0fm duration=%.0fs points=%d", result.distance_m, result.duration_s, len(result.path))
        return result
