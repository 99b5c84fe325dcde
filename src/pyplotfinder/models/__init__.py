"""Data models for pyplotfinder."""

from pyplotfinder.models._base import PlotFinderBaseModel
from pyplotfinder.models.geo import Coordinates
from pyplotfinder.models.location import (
    ArbiterState,
    LocationFix,
    LocationSample,
    LocationSource,
    OriginState,
    SimulatedSeries,
)
from pyplotfinder.models.record import (
    BurialRecord,
    MatchClassification,
    NameQuery,
    SearchOutcome,
    SearchStatus,
)
from pyplotfinder.models.route import RouteRequest, RouteResult, RouteUpdate
from pyplotfinder.models.token import DecodedToken, DisplayEntry

__all__ = [
    "ArbiterState",
    "BurialRecord",
    "Coordinates",
    "DecodedToken",
    "DisplayEntry",
    "LocationFix",
    "LocationSample",
    "LocationSource",
    "MatchClassification",
    "NameQuery",
    "OriginState",
    "PlotFinderBaseModel",
    "RouteRequest",
    "RouteResult",
    "RouteUpdate",
    "SearchOutcome",
    "SearchStatus",
    "SimulatedSeries",
]
