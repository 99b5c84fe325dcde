"""pyplotfinder - Async Python library for locating burial plots."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyplotfinder")
except PackageNotFoundError:
    __version__ = "0+local"
from pyplotfinder.client import PlotFinderClient
from pyplotfinder.config import MqttSettings, PlotFinderConfig
from pyplotfinder.exceptions import (
    LocationError,
    LocationFeedError,
    LocationUnavailableError,
    PlotFinderConfigError,
    PlotFinderError,
    PlotFinderTransportError,
    RoutingError,
    SimulatedSeriesError,
)
from pyplotfinder.location import LocationArbiter, MqttLocationFeed, SampleLog, SimulatedFeed
from pyplotfinder.models import (
    ArbiterState,
    BurialRecord,
    Coordinates,
    DecodedToken,
    DisplayEntry,
    LocationFix,
    LocationSample,
    LocationSource,
    MatchClassification,
    NameQuery,
    OriginState,
    RouteRequest,
    RouteResult,
    RouteUpdate,
    SearchOutcome,
    SearchStatus,
    SimulatedSeries,
)
from pyplotfinder.routing import OsrmRoutingEngine, RouteCoordinator
from pyplotfinder.search import classify, search_records
from pyplotfinder.tokens import display_entries, parse_token

__all__ = [
    "__version__",
    "ArbiterState",
    "BurialRecord",
    "Coordinates",
    "DecodedToken",
    "DisplayEntry",
    "LocationArbiter",
    "LocationError",
    "LocationFeedError",
    "LocationFix",
    "LocationSample",
    "LocationSource",
    "LocationUnavailableError",
    "MatchClassification",
    "MqttLocationFeed",
    "MqttSettings",
    "NameQuery",
    "OriginState",
    "OsrmRoutingEngine",
    "PlotFinderClient",
    "PlotFinderConfig",
    "PlotFinderConfigError",
    "PlotFinderError",
    "PlotFinderTransportError",
    "RouteCoordinator",
    "RouteRequest",
    "RouteResult",
    "RouteUpdate",
    "RoutingError",
    "SampleLog",
    "SearchOutcome",
    "SearchStatus",
    "SimulatedFeed",
    "SimulatedSeries",
    "SimulatedSeriesError",
    "classify",
    "display_entries",
    "parse_token",
    "search_records",
]
