"""Great-circle distance and the proximity fallback."""

from __future__ import annotations

import math

from pyplotfinder._constants import EARTH_RADIUS_M, ORIGIN_RADIUS_M
from pyplotfinder.models.geo import Coordinates


def haversine_m(a: Coordinates | None, b: Coordinates | None) -> float:
    """Haversine distance in meters; ``inf`` when either point is missing."""
    if a is None or b is None:
        return math.inf
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    d_lat = math.radians(b.lat - a.lat)
    d_lng = math.radians(b.lng - a.lng)
    h = math.sin(d_lat / 2.0) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2.0) ** 2
    return 2.0 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def resolve_effective_origin(
    fix: Coordinates | None,
    reference: Coordinates,
    radius_m: float = ORIGIN_RADIUS_M,
) -> tuple[Coordinates, bool]:
    """Pick the routing origin for *fix*.

    Returns ``(origin, outside_radius)``.  The reference point is used
    when there is no valid fix or the fix is farther than *radius_m*
    from it; a fix exactly on the radius still counts as inside.
    """
    if fix is None or not fix.is_valid:
        return reference, True
    if haversine_m(fix, reference) > radius_m:
        return reference, True
    return fix, False
