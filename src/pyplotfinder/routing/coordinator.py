"""Keeps the routing engine fed with the current origin/destination pair."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pyplotfinder.exceptions import PlotFinderError
from pyplotfinder.location.arbiter import LocationArbiter
from pyplotfinder.models.geo import Coordinates
from pyplotfinder.models.route import RouteRequest, RouteUpdate
from pyplotfinder.routing.osrm import RoutingEngine

_logger = logging.getLogger(__name__)

RouteListener = Callable[[RouteUpdate], None]
ErrorListener = Callable[[Exception], None]


class RouteCoordinator:
    """Issues a fresh route request on every destination or location change.

    Requests are never deduplicated.  A request still in flight when a
    newer one is issued is cancelled, and a result that arrives for a
    superseded request is discarded.  Without a destination the
    coordinator is idle.
    """

    def __init__(
        self,
        arbiter: LocationArbiter,
        engine: RoutingEngine,
        *,
        destination: Coordinates | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._arbiter = arbiter
        self._engine = engine
        self._loop = loop
        self._destination: Coordinates | None = None
        self._last_request: RouteRequest | None = None
        self._last_update: RouteUpdate | None = None
        self._last_error: Exception | None = None
        self._generation = 0
        self._task: asyncio.Task[RouteUpdate | None] | None = None
        self._route_listeners: list[RouteListener] = []
        self._error_listeners: list[ErrorListener] = []
        self._remove_arbiter_listener: Callable[[], None] | None = arbiter.add_listener(self.refresh)
        if destination is not None:
            self.set_destination(destination)

    @property
    def destination(self) -> Coordinates | None:
        return self._destination

    @property
    def last_request(self) -> RouteRequest | None:
        return self._last_request

    @property
    def last_update(self) -> RouteUpdate | None:
        return self._last_update

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    @property
    def outside_radius(self) -> bool:
        """Whether the latest request had to start from the reference point."""
        return self._last_request is not None and self._last_request.outside_radius

    @property
    def consent_required(self) -> bool:
        """A destination is set in real mode but the visitor has not consented yet."""
        arbiter = self._arbiter
        return self._destination is not None and not arbiter.simulated and not arbiter.consent_granted

    def add_route_listener(self, listener: RouteListener) -> Callable[[], None]:
        """Call *listener* with every route that is not superseded."""
        return _register(self._route_listeners, listener)

    def add_error_listener(self, listener: ErrorListener) -> Callable[[], None]:
        return _register(self._error_listeners, listener)

    def set_destination(self, destination: Coordinates | None) -> RouteRequest | None:
        self._destination = destination
        if destination is None:
            self._cancel_pending()
            self._last_request = None
            self._last_update = None
            _logger.debug("Destination cleared; routing idle")
            return None
        return self.refresh()

    def refresh(self) -> RouteRequest | None:
        """Recompute the effective origin and request a new route."""
        destination = self._destination
        if destination is None:
            return None
        origin, outside_radius = self._arbiter.effective_origin()
        request = RouteRequest(origin=origin, destination=destination, outside_radius=outside_radius)
        self._last_request = request
        self._cancel_pending()
        self._generation += 1
        loop = self._loop or asyncio.get_running_loop()
        self._task = loop.create_task(self._compute(self._generation, request))
        _logger.debug(
            "Route requested origin=%s destination=%s outside_radius=%s",
            origin.as_tuple(),
            destination.as_tuple(),
            outside_radius,
        )
        return request

    async def wait(self) -> RouteUpdate | None:
        """Wait for the request currently in flight, if any."""
        while True:
            task = self._task
            if task is None:
                return self._last_update
            try:
                update = await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
                if task is self._task:
                    return None
                continue
            if task is self._task:
                return update

    def close(self) -> None:
        if self._remove_arbiter_listener is not None:
            self._remove_arbiter_listener()
            self._remove_arbiter_listener = None
        self._cancel_pending()
        self._route_listeners.clear()
        self._error_listeners.clear()

    def _cancel_pending(self) -> None:
        self._generation += 1
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    async def _compute(self, generation: int, request: RouteRequest) -> RouteUpdate | None:
        try:
            result = await self._engine.route(request.waypoints)
        except Exception as exc:
            if generation != self._generation:
                return None
            if isinstance(exc, PlotFinderError):
                _logger.warning("Routing failed: %s", exc)
            else:
                _logger.warning("Routing engine raised unexpectedly", exc_info=True)
            self._last_error = exc
            _emit(self._error_listeners, exc)
            return None

        if generation != self._generation:
            _logger.debug("Discarding route for a superseded request")
            return None
        update = RouteUpdate(request=request, result=result)
        self._last_update = update
        self._last_error = None
        _emit(self._route_listeners, update)
        return update


def _register(listeners: list[Callable[..., None]], listener: Callable[..., None]) -> Callable[[], None]:
    listeners.append(listener)

    def remove() -> None:
        if listener in listeners:
            listeners.remove(listener)

    return remove


def _emit(listeners: list[Callable[..., None]], value: object) -> None:
    for listener in list(listeners):
        try:
            listener(value)
        except Exception:
            _logger.warning("Route listener failed", exc_info=True)
