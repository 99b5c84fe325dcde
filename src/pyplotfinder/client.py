"""High-level async client tying search, token decoding, location and routing together."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from datetime import date, datetime
from pathlib import Path
from typing import Any

import aiohttp

from pyplotfinder._api.records import HttpRecordSource, RecordSource
from pyplotfinder._constants import SAMPLE_EXPORT_FILENAME
from pyplotfinder._transport import JsonTransport
from pyplotfinder.config import PlotFinderConfig
from pyplotfinder.exceptions import PlotFinderConfigError, PlotFinderError
from pyplotfinder.location.arbiter import LocationArbiter
from pyplotfinder.location.feeds import RealLocationFeed, SimulatedFeed
from pyplotfinder.location.mqtt_feed import MqttLocationFeed
from pyplotfinder.models.location import SimulatedSeries
from pyplotfinder.models.record import BurialRecord, NameQuery, SearchOutcome
from pyplotfinder.models.token import DecodedToken
from pyplotfinder.routing.coordinator import RouteCoordinator
from pyplotfinder.routing.osrm import OsrmRoutingEngine, RoutingEngine
from pyplotfinder.search.engine import search_records
from pyplotfinder.tokens.parser import parse_token

_logger = logging.getLogger(__name__)


class PlotFinderClient:
    """Async facade over the record locator.

    Usage::

        async with PlotFinderClient(config) as client:
            await client.load_records()
            outcome = client.search("Juan", "Dela Cruz", "1950-01-02", "2020-03-04")
            update = await client.coordinator.wait()

    Collaborators that are not passed in are built from ``config``:
    an OSRM engine over a shared aiohttp session, an HTTP record source
    when ``records_url`` is set, and an MQTT device feed when the broker
    settings are complete.
    """

    def __init__(
        self,
        config: PlotFinderConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        record_source: RecordSource | None = None,
        real_feed: RealLocationFeed | None = None,
        routing_engine: RoutingEngine | None = None,
        series: Sequence[SimulatedSeries] | None = None,
    ) -> None:
        self._config = config or PlotFinderConfig()
        self._external_session = session is not None
        self._http_session = session
        self._record_source = record_source
        self._real_feed = real_feed
        self._owned_mqtt_feed: MqttLocationFeed | None = None
        self._routing_engine = routing_engine
        self._series = series
        self._records: list[BurialRecord] = []
        self._arbiter: LocationArbiter | None = None
        self._coordinator: RouteCoordinator | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> PlotFinderClient:
        loop = asyncio.get_running_loop()
        config = self._config

        if self._routing_engine is None or (self._record_source is None and config.records_url):
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = JsonTransport(self._http_session, timeout=config.routing_timeout)
            if self._routing_engine is None:
                self._routing_engine = OsrmRoutingEngine(
                    transport,
                    base_url=config.routing_base_url,
                    profile=config.routing_profile,
                )
            if self._record_source is None and config.records_url:
                self._record_source = HttpRecordSource(transport, config.records_url)

        if self._real_feed is None and config.mqtt.configured:
            self._owned_mqtt_feed = MqttLocationFeed(config.mqtt, loop=loop)
            self._real_feed = self._owned_mqtt_feed

        simulated_feed = SimulatedFeed(self._series, interval_ms=config.simulated_interval_ms, loop=loop)
        self._arbiter = LocationArbiter(
            simulated_feed=simulated_feed,
            real_feed=self._real_feed,
            reference_point=config.reference_point,
            radius_m=config.origin_radius_m,
            sample_capacity=config.sample_log_capacity,
            live_report_interval=config.live_report_interval,
            loop=loop,
        )
        self._coordinator = RouteCoordinator(self._arbiter, self._routing_engine, loop=loop)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._coordinator is not None:
            self._coordinator.close()
            self._coordinator = None
        if self._arbiter is not None:
            self._arbiter.close()
            self._arbiter = None
        if self._owned_mqtt_feed is not None:
            self._owned_mqtt_feed.close()
            self._owned_mqtt_feed = None
            self._real_feed = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> PlotFinderConfig:
        return self._config

    @property
    def records(self) -> list[BurialRecord]:
        return list(self._records)

    @property
    def arbiter(self) -> LocationArbiter:
        if self._arbiter is None:
            raise PlotFinderError("Client not initialized. Use 'async with PlotFinderClient(...) as client:'")
        return self._arbiter

    @property
    def coordinator(self) -> RouteCoordinator:
        if self._coordinator is None:
            raise PlotFinderError("Client not initialized. Use 'async with PlotFinderClient(...) as client:'")
        return self._coordinator

    # ------------------------------------------------------------------
    # Records and search
    # ------------------------------------------------------------------

    async def load_records(self) -> list[BurialRecord]:
        """Fetch the searchable records from the record source."""
        if self._record_source is None:
            raise PlotFinderConfigError("No record source configured (set records_url or pass record_source)")
        self._records = await self._record_source.fetch_records()
        return list(self._records)

    def set_records(self, records: Sequence[BurialRecord]) -> None:
        self._records = list(records)

    def search(
        self,
        first_name: str = "",
        last_name: str = "",
        birth_date: date | datetime | str | None = None,
        death_date: date | datetime | str | None = None,
    ) -> SearchOutcome:
        """Search the loaded records.

        A single selected match is routed to right away; any other outcome
        clears the previous destination.
        """
        outcome = search_records(
            self._records,
            NameQuery(first_name=first_name, last_name=last_name),
            birth_date,
            death_date,
        )
        if outcome.selected is not None:
            self.select(outcome.selected)
        else:
            self.coordinator.set_destination(None)
        return outcome

    def select(self, record: BurialRecord) -> DecodedToken:
        """Route to *record*'s plot using the position on its marker token."""
        decoded = parse_token(record.marker_token)
        if not decoded.has_coordinates:
            _logger.info("Record %s has no geocoded marker; routing idle", record.id)
        self._route_to(decoded)
        return decoded

    def scan(self, token: str | None) -> DecodedToken:
        """Decode a scanned marker and route to it when it carries a position."""
        decoded = parse_token(token)
        if not decoded.has_coordinates:
            _logger.info("Scanned token has no geocoded data")
        self._route_to(decoded)
        return decoded

    def clear(self) -> None:
        """Drop the current destination."""
        self.coordinator.set_destination(None)

    def _route_to(self, decoded: DecodedToken) -> None:
        destination = decoded.coordinates if decoded.has_coordinates else None
        self.coordinator.set_destination(destination)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def export_samples(self) -> str:
        """JSON document of the location sample log."""
        return self.arbiter.samples.export_json()

    def write_samples(self, path: str | Path = SAMPLE_EXPORT_FILENAME) -> Path:
        return self.arbiter.samples.write_json(path)
