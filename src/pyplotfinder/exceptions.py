"""Custom exception hierarchy for pyplotfinder."""

from __future__ import annotations


class PlotFinderError(Exception):
    """Base exception for all pyplotfinder errors."""


class PlotFinderConfigError(PlotFinderError):
    """Invalid or missing configuration."""


class PlotFinderTransportError(PlotFinderError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class RoutingError(PlotFinderError):
    """Routing engine answered but could not produce a route."""

    def __init__(self, message: str, *, code: str = "") -> None:
        self.code = code
        super().__init__(message)


class LocationError(PlotFinderError):
    """Base for location feed failures."""


class LocationUnavailableError(LocationError):
    """The device has no usable location capability.

    Raised by real feeds when they cannot be started at all (no broker
    configured, connection refused, ...).  The arbiter catches it and
    degrades to the disabled state.
    """


class LocationFeedError(LocationError):
    """A single fix could not be produced or decoded.

    Transient: the watch stays active and may recover on the next emission.
    """


class SimulatedSeriesError(PlotFinderError):
    """Unknown series id or malformed series document."""
