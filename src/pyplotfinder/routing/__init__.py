"""Routing engine adapter and the route coordinator."""

from pyplotfinder.routing.coordinator import RouteCoordinator
from pyplotfinder.routing.osrm import OsrmRoutingEngine, RoutingEngine, format_waypoints, parse_route_response

__all__ = [
    "OsrmRoutingEngine",
    "RouteCoordinator",
    "RoutingEngine",
    "format_waypoints",
    "parse_route_response",
]
