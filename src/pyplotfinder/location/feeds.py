"""Location feed interfaces and the scripted (simulated) feed.

A feed pushes :class:`LocationFix` objects to a callback until the
returned subscription is cancelled.  Cancellation is synchronous: once
``cancel()`` returns the feed will not call the callback again.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Mapping, Sequence
from importlib import resources
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from pyplotfinder._constants import DEFAULT_SIMULATED_INTERVAL_MS, MIN_SIMULATED_INTERVAL_MS, SIMULATED_ACCURACY_M
from pyplotfinder.exceptions import SimulatedSeriesError
from pyplotfinder.models.geo import Coordinates
from pyplotfinder.models.location import LocationFix, SimulatedSeries

_logger = logging.getLogger(__name__)

FixCallback = Callable[[LocationFix], None]
ErrorCallback = Callable[[Exception], None]


class FeedSubscription(Protocol):
    """Handle of a running watch."""

    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class RealLocationFeed(Protocol):
    """Capability-gated device location feed.

    ``watch`` raises :class:`~pyplotfinder.exceptions.LocationUnavailableError`
    when the capability cannot be started.  Per-fix failures are passed
    to ``on_error`` and do not end the watch.
    """

    @property
    def available(self) -> bool: ...

    def request_fix(self, on_fix: FixCallback, on_error: ErrorCallback) -> None: ...

    def watch(self, on_fix: FixCallback, on_error: ErrorCallback) -> FeedSubscription: ...


class SimulatedLocationFeed(Protocol):
    """Deterministic feed driven by a selectable named series."""

    def select(self, series_id: str, interval_ms: int | None = None) -> None: ...

    def watch(self, on_fix: FixCallback) -> FeedSubscription: ...


def clamp_interval(interval_ms: int) -> int:
    if interval_ms < MIN_SIMULATED_INTERVAL_MS:
        _logger.debug("Simulated interval %sms raised to %sms", interval_ms, MIN_SIMULATED_INTERVAL_MS)
        return MIN_SIMULATED_INTERVAL_MS
    return int(interval_ms)


def parse_series_document(document: Any) -> list[SimulatedSeries]:
    """Validate ``{"series": [{"id", "label", "points": [{lat, lng}]}]}``."""
    if not isinstance(document, Mapping) or not isinstance(document.get("series"), list):
        raise SimulatedSeriesError("Series document must be an object with a 'series' list")
    try:
        return [SimulatedSeries.model_validate(item) for item in document["series"]]
    except ValidationError as exc:
        raise SimulatedSeriesError(f"Invalid series entry: {exc}") from exc


def load_series(source: str | Path | Mapping[str, Any] | None = None) -> list[SimulatedSeries]:
    """Load scripted walks from a file, a parsed document, or the bundled default."""
    if isinstance(source, Mapping):
        return parse_series_document(source)
    try:
        if source is None:
            text = resources.files("pyplotfinder.data").joinpath("simulated_series.json").read_text(encoding="utf-8")
        else:
            text = Path(source).read_text(encoding="utf-8")
        document = json.loads(text)
    except (OSError, ValueError) as exc:
        raise SimulatedSeriesError(f"Could not read series document {source!s}: {exc}") from exc
    return parse_series_document(document)


class _SimulatedWalk:
    """One running walk; restartable when another series is selected."""

    def __init__(self, feed: SimulatedFeed, on_fix: FixCallback) -> None:
        self._feed = feed
        self._on_fix = on_fix
        self._task: asyncio.Task[None] | None = None
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    def start(self, points: Sequence[Coordinates], interval_ms: int) -> None:
        self._stop_task()
        if self._cancelled or not points:
            return
        loop = self._feed.loop or asyncio.get_running_loop()
        self._task = loop.create_task(self._run(tuple(points), interval_ms))

    def cancel(self) -> None:
        self._cancelled = True
        self._stop_task()
        self._feed._forget(self)  # noqa: SLF001

    def _stop_task(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()

    async def _run(self, points: tuple[Coordinates, ...], interval_ms: int) -> None:
        index = 0
        while not self._cancelled:
            point = points[index % len(points)]
            index += 1
            try:
                self._on_fix(LocationFix(lat=point.lat, lng=point.lng, accuracy=SIMULATED_ACCURACY_M))
            except Exception:
                _logger.debug("Simulated fix callback failed", exc_info=True)
            await asyncio.sleep(interval_ms / 1000.0)


class SimulatedFeed:
    """Replays a named :class:`SimulatedSeries` point by point.

    The walk starts at the first point immediately, then advances every
    ``interval_ms`` and wraps around at the end of the series.  Selecting
    another series restarts every running walk from its first point.
    """

    def __init__(
        self,
        series: Sequence[SimulatedSeries] | None = None,
        *,
        series_id: str | None = None,
        interval_ms: int = DEFAULT_SIMULATED_INTERVAL_MS,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        catalog = list(series) if series is not None else load_series()
        self._series: dict[str, SimulatedSeries] = {item.id: item for item in catalog}
        self._selected: str | None = series_id or (catalog[0].id if catalog else None)
        if self._selected is not None and self._selected not in self._series:
            raise SimulatedSeriesError(f"Unknown series id {self._selected!r}")
        self._interval_ms = clamp_interval(interval_ms)
        self.loop = loop
        self._walks: list[_SimulatedWalk] = []

    @property
    def series_ids(self) -> list[str]:
        return list(self._series)

    @property
    def selected_id(self) -> str | None:
        return self._selected

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def points(self) -> tuple[Coordinates, ...]:
        if self._selected is None:
            return ()
        return self._series[self._selected].points

    def select(self, series_id: str, interval_ms: int | None = None) -> None:
        if series_id not in self._series:
            raise SimulatedSeriesError(f"Unknown series id {series_id!r}")
        self._selected = series_id
        if interval_ms is not None:
            self._interval_ms = clamp_interval(interval_ms)
        _logger.debug("Simulated series selected id=%s interval=%sms", series_id, self._interval_ms)
        for walk in list(self._walks):
            walk.start(self.points(), self._interval_ms)

    def watch(self, on_fix: FixCallback) -> FeedSubscription:
        walk = _SimulatedWalk(self, on_fix)
        self._walks.append(walk)
        walk.start(self.points(), self._interval_ms)
        return walk

    def _forget(self, walk: _SimulatedWalk) -> None:
        if walk in self._walks:
            self._walks.remove(walk)
