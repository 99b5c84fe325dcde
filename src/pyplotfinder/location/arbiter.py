"""Real-vs-simulated location arbitration.

:class:`LocationArbiter` owns the only live feed subscription, the
visitor's consent flag, the latest accepted fix and the sample log.

States::

    DISABLED ──set_simulated(True)──▶ SIMULATED_ACTIVE
    DISABLED ──grant_consent()─────▶ REAL_PENDING ──first real fix──▶ REAL_ACTIVE
    SIMULATED_ACTIVE ──set_simulated(False), consent──▶ REAL_PENDING
    SIMULATED_ACTIVE ──set_simulated(False), no consent──▶ DISABLED
    REAL_* ──set_simulated(True)──▶ SIMULATED_ACTIVE
    REAL_* ──revoke_consent()──▶ DISABLED
    REAL_* ──feed reports LocationUnavailableError──▶ DISABLED

Every subscription is tagged with a generation number.  Stopping a
subscription bumps the generation, so a callback that is already
queued by the old feed is dropped instead of being logged as a sample
of the new mode.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from pyplotfinder._constants import LIVE_REPORT_INTERVAL_S, ORIGIN_RADIUS_M, REFERENCE_LAT, REFERENCE_LNG, SAMPLE_LOG_CAPACITY
from pyplotfinder.exceptions import LocationUnavailableError
from pyplotfinder.location.feeds import FeedSubscription, RealLocationFeed, SimulatedLocationFeed
from pyplotfinder.location.geo import resolve_effective_origin
from pyplotfinder.location.samples import SampleLog
from pyplotfinder.models.geo import Coordinates
from pyplotfinder.models.location import ArbiterState, LocationFix, LocationSource, OriginState

_logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class LocationArbiter:
    """Single owner of the origin state.

    Parameters
    ----------
    simulated_feed : SimulatedLocationFeed
        Scripted feed used while simulated mode is on.
    real_feed : RealLocationFeed or None
        Device feed.  ``None`` means the capability is missing.
    reference_point : Coordinates
        Origin of last resort.
    radius_m : float
        Proximity fallback radius in meters.
    sample_capacity : int
        Size of the sample log.
    live_report_interval : float
        Seconds between "live position" debug reports while real
        tracking runs; ``0`` disables them.
    clock : callable
        Wall clock in seconds, used to timestamp samples.
    loop : asyncio.AbstractEventLoop or None
        Loop used to schedule live reports.  Defaults to the running loop.
    """

    def __init__(
        self,
        *,
        simulated_feed: SimulatedLocationFeed,
        real_feed: RealLocationFeed | None = None,
        reference_point: Coordinates | None = None,
        radius_m: float = ORIGIN_RADIUS_M,
        sample_capacity: int = SAMPLE_LOG_CAPACITY,
        live_report_interval: float = LIVE_REPORT_INTERVAL_S,
        clock: Callable[[], float] = time.time,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._simulated_feed = simulated_feed
        self._real_feed = real_feed
        self._reference = reference_point or Coordinates(lat=REFERENCE_LAT, lng=REFERENCE_LNG)
        self._radius_m = radius_m
        self._samples = SampleLog(sample_capacity)
        self._live_report_interval = live_report_interval
        self._clock = clock
        self._loop = loop

        self._mode = LocationSource.REAL
        self._consent = False
        self._state = ArbiterState.DISABLED
        self._current_fix: LocationFix | None = None
        self._current_source: LocationSource | None = None

        self._subscription: FeedSubscription | None = None
        self._generation = 0
        self._live_report: asyncio.TimerHandle | None = None
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def state(self) -> ArbiterState:
        return self._state

    @property
    def mode(self) -> LocationSource:
        return self._mode

    @property
    def simulated(self) -> bool:
        return self._mode is LocationSource.SIMULATED

    @property
    def consent_granted(self) -> bool:
        return self._consent

    @property
    def current_fix(self) -> LocationFix | None:
        return self._current_fix

    @property
    def current_source(self) -> LocationSource | None:
        return self._current_source

    @property
    def samples(self) -> SampleLog:
        return self._samples

    @property
    def reference_point(self) -> Coordinates:
        return self._reference

    @property
    def radius_m(self) -> float:
        return self._radius_m

    @property
    def origin_state(self) -> OriginState:
        fix = self._current_fix
        return OriginState(
            mode=self._mode,
            consent_granted=self._consent,
            current_fix=fix.coordinates if fix is not None else None,
        )

    def effective_origin(self) -> tuple[Coordinates, bool]:
        """``(origin, outside_radius)`` for the current fix, computed fresh."""
        fix = self._current_fix
        return resolve_effective_origin(
            fix.coordinates if fix is not None else None,
            self._reference,
            self._radius_m,
        )

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every state change or accepted fix."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_simulated(self, enabled: bool) -> None:
        if enabled == self.simulated:
            return
        self._stop_subscription()
        self._clear_fix()
        if enabled:
            self._mode = LocationSource.SIMULATED
            self._start_simulated()
        else:
            self._mode = LocationSource.REAL
            if self._consent:
                self._start_real()
            else:
                self._state = ArbiterState.DISABLED
        _logger.debug("Location mode=%s state=%s", self._mode, self._state)
        self._notify()

    def grant_consent(self) -> bool:
        """Record consent and start real tracking when in real mode.

        Returns ``False`` when the device feed could not be started; the
        arbiter then stays disabled.
        """
        self._consent = True
        if self.simulated:
            self._notify()
            return True
        if self._subscription is not None and self._subscription.active:
            return True
        started = self._start_real()
        self._notify()
        return started

    def revoke_consent(self) -> None:
        if not self._consent:
            return
        self._consent = False
        if not self.simulated:
            self._stop_subscription()
            self._clear_fix()
            self._state = ArbiterState.DISABLED
        self._notify()

    def select_series(self, series_id: str, interval_ms: int | None = None) -> None:
        """Pick the scripted walk; a running simulated walk restarts from its first point."""
        self._simulated_feed.select(series_id, interval_ms)

    def close(self) -> None:
        self._stop_subscription()
        self._state = ArbiterState.DISABLED
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Subscription lifecycle
    # ------------------------------------------------------------------

    def _start_simulated(self) -> None:
        generation = self._next_generation()
        self._state = ArbiterState.SIMULATED_ACTIVE
        self._subscription = self._simulated_feed.watch(
            lambda fix: self._accept(generation, LocationSource.SIMULATED, fix),
        )

    def _start_real(self) -> bool:
        feed = self._real_feed
        if feed is None or not feed.available:
            _logger.warning("Device location is unavailable; staying disabled")
            self._state = ArbiterState.DISABLED
            return False

        generation = self._next_generation()
        self._state = ArbiterState.REAL_PENDING

        def on_fix(fix: LocationFix) -> None:
            self._accept(generation, LocationSource.REAL, fix)

        def on_error(exc: Exception) -> None:
            self._feed_error(generation, exc)

        try:
            feed.request_fix(on_fix, on_error)
            self._subscription = feed.watch(on_fix, on_error)
        except LocationUnavailableError as exc:
            _logger.warning("Device location could not be started: %s", exc)
            self._next_generation()
            self._subscription = None
            self._state = ArbiterState.DISABLED
            return False

        self._schedule_live_report(generation)
        return True

    def _stop_subscription(self) -> None:
        self._next_generation()
        if self._live_report is not None:
            self._live_report.cancel()
            self._live_report = None
        subscription = self._subscription
        self._subscription = None
        if subscription is not None:
            subscription.cancel()

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _clear_fix(self) -> None:
        self._current_fix = None
        self._current_source = None

    # ------------------------------------------------------------------
    # Feed callbacks
    # ------------------------------------------------------------------

    def _accept(self, generation: int, source: LocationSource, fix: LocationFix) -> None:
        if generation != self._generation:
            _logger.debug("Dropping %s fix from a stopped subscription", source)
            return
        self._samples.append(fix, source=source, timestamp_ms=int(self._clock() * 1000))
        self._current_fix = fix
        self._current_source = source
        if source is LocationSource.REAL and self._state is ArbiterState.REAL_PENDING:
            self._state = ArbiterState.REAL_ACTIVE
            _logger.debug("First device fix received")
        self._notify()

    def _feed_error(self, generation: int, exc: Exception) -> None:
        if generation != self._generation:
            return
        if isinstance(exc, LocationUnavailableError):
            _logger.warning("Device location lost; staying disabled: %s", exc)
            self._stop_subscription()
            self._clear_fix()
            self._state = ArbiterState.DISABLED
            self._notify()
            return
        _logger.warning("Location feed error: %s", exc)

    def _schedule_live_report(self, generation: int) -> None:
        if self._live_report_interval <= 0:
            return
        loop = self._loop
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                _logger.debug("No running event loop; live position report disabled")
                return
        self._live_report = loop.call_later(self._live_report_interval, self._report_live, generation)

    def _report_live(self, generation: int) -> None:
        if generation != self._generation:
            return
        fix = self._current_fix
        if fix is not None:
            _logger.debug(
                "Live position lat=%.6f lng=%.6f accuracy=%s samples=%d",
                fix.lat,
                fix.lng,
                fix.accuracy,
                len(self._samples),
            )
        self._schedule_live_report(generation)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                _logger.warning("Location listener failed", exc_info=True)
