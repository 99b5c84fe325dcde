"""Location sources, arbitration and the sample log."""

from pyplotfinder.location.arbiter import LocationArbiter
from pyplotfinder.location.feeds import (
    FeedSubscription,
    RealLocationFeed,
    SimulatedFeed,
    SimulatedLocationFeed,
    load_series,
)
from pyplotfinder.location.geo import haversine_m, resolve_effective_origin
from pyplotfinder.location.mqtt_feed import MqttLocationFeed, parse_location_message
from pyplotfinder.location.samples import SampleLog

__all__ = [
    "FeedSubscription",
    "LocationArbiter",
    "MqttLocationFeed",
    "RealLocationFeed",
    "SampleLog",
    "SimulatedFeed",
    "SimulatedLocationFeed",
    "haversine_m",
    "load_series",
    "parse_location_message",
    "resolve_effective_origin",
]
