"""Device location feed over MQTT.

Phones running a location publisher (OwnTracks and compatible apps)
post JSON messages such as::

    {"_type": "location", "lat": 15.49, "lon": 120.55, "acc": 8,
     "vel": 4, "cog": 270, "tst": 1700000000}

``vel`` is in km/h and is converted to m/s.  Messages of any other
``_type`` (transitions, last-will notices) are ignored.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from typing import Any, cast

import paho.mqtt.client as mqtt
from pydantic import Field, ValidationError

from pyplotfinder.config import MqttSettings
from pyplotfinder.exceptions import LocationFeedError, LocationUnavailableError
from pyplotfinder.location.feeds import ErrorCallback, FeedSubscription, FixCallback
from pyplotfinder.models._base import PlotFinderBaseModel
from pyplotfinder.models.location import LocationFix

_logger = logging.getLogger(__name__)

_KMH_TO_MS = 1000.0 / 3600.0


class OwnTracksLocation(PlotFinderBaseModel):
    """Location message as published by the device."""

    type: str = Field(default="location", alias="_type")
    lat: float
    lon: float
    acc: float | None = None
    vel: float | None = None
    cog: float | None = None
    tst: int | None = None

    def to_fix(self) -> LocationFix:
        return LocationFix(
            lat=self.lat,
            lng=self.lon,
            accuracy=self.acc,
            speed=self.vel * _KMH_TO_MS if self.vel is not None else None,
            heading=self.cog,
        )


def parse_location_message(payload: bytes | str) -> LocationFix | None:
    """Decode one MQTT payload.

    Returns ``None`` for messages that are not location reports and
    raises :class:`LocationFeedError` for undecodable ones.
    """
    text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
    try:
        parsed = json.loads(text)
    except ValueError as exc:
        raise LocationFeedError(f"Location message is not JSON: {text[:64]!r}") from exc
    if not isinstance(parsed, dict):
        raise LocationFeedError("Location message is not a JSON object")
    if parsed.get("_type", "location") != "location":
        return None
    try:
        message = OwnTracksLocation.model_validate(parsed)
    except ValidationError as exc:
        raise LocationFeedError(f"Invalid location message: {exc}") from exc
    fix = message.to_fix()
    if not fix.coordinates.is_valid:
        raise LocationFeedError(f"Location message has out-of-range coordinates ({fix.lat}, {fix.lng})")
    return fix


class _MqttWatch:
    def __init__(self, feed: MqttLocationFeed, on_fix: FixCallback, on_error: ErrorCallback) -> None:
        self._feed = feed
        self.on_fix = on_fix
        self.on_error = on_error
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._feed._release(self)  # noqa: SLF001

    def deactivate(self) -> None:
        self._active = False


class MqttLocationFeed:
    """Threaded paho-mqtt runtime that emits fixes onto an asyncio loop.

    The broker connection is opened by the first ``watch`` and closed
    when the last watch is cancelled.  All callbacks run on the loop.
    A broker that refuses the connection ends every watch with
    :class:`LocationUnavailableError` through its error callback.
    """

    def __init__(
        self,
        settings: MqttSettings,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        client_factory: Callable[..., mqtt.Client] | None = None,
    ) -> None:
        self._settings = settings
        self._loop = loop
        self._client_factory = client_factory or mqtt.Client
        self._client: mqtt.Client | None = None
        self._watches: list[_MqttWatch] = []
        self._pending: list[tuple[FixCallback, ErrorCallback]] = []
        self._last_fix: LocationFix | None = None

    @property
    def available(self) -> bool:
        return self._settings.configured

    @property
    def is_running(self) -> bool:
        return self._client is not None

    @property
    def last_fix(self) -> LocationFix | None:
        return self._last_fix

    def request_fix(self, on_fix: FixCallback, on_error: ErrorCallback) -> None:
        """Deliver the latest known fix, or the next one to arrive."""
        if not self.available:
            raise LocationUnavailableError("MQTT location feed is not configured")
        loop = self._ensure_loop()
        if self._last_fix is not None:
            loop.call_soon(on_fix, self._last_fix)
            return
        self._pending.append((on_fix, on_error))

    def watch(self, on_fix: FixCallback, on_error: ErrorCallback) -> FeedSubscription:
        if not self.available:
            raise LocationUnavailableError("MQTT location feed is not configured")
        self._ensure_loop()
        if self._client is None:
            self._start()
        watch = _MqttWatch(self, on_fix, on_error)
        self._watches.append(watch)
        return watch

    def close(self) -> None:
        for watch in list(self._watches):
            watch.cancel()
        self._pending.clear()
        self._stop()

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _release(self, watch: _MqttWatch) -> None:
        if watch in self._watches:
            self._watches.remove(watch)
        if not self._watches:
            self._pending.clear()
            self._stop()

    def _start(self) -> None:
        settings = self._settings
        _logger.debug(
            "MQTT location feed start host=%s port=%s topic=%s client_id=%s",
            settings.host,
            settings.port,
            settings.topic,
            settings.client_id,
        )
        client = self._client_factory(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=settings.client_id,
        )
        client.enable_logger(_logger)
        if settings.username:
            client.username_pw_set(settings.username, settings.password)
        if settings.tls:
            client.tls_set()

        topic = settings.topic
        loop = self._ensure_loop()

        def on_connect(c: mqtt.Client, _userdata: Any, _flags: Any, reason_code: Any, _properties: Any) -> None:
            if reason_code.is_failure:
                exc = LocationUnavailableError(f"MQTT broker refused the connection: {reason_code}")
                loop.call_soon_threadsafe(self._dispatch_unavailable, exc)
                return
            _logger.debug("MQTT connected, subscribing topic=%s", topic)
            c.subscribe(topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            try:
                fix = parse_location_message(msg.payload)
            except LocationFeedError as exc:
                loop.call_soon_threadsafe(self._dispatch_error, exc)
                return
            except Exception:
                _logger.debug("MQTT payload parse failure", exc_info=True)
                return
            if fix is None:
                _logger.debug("Ignoring non-location message on %s", msg.topic)
                return
            loop.call_soon_threadsafe(self._dispatch_fix, fix)

        def on_disconnect(_c: mqtt.Client, _userdata: Any, _flags: Any, reason_code: Any, _properties: Any) -> None:
            if self._client is not None:
                _logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        try:
            client.connect(settings.host, settings.port, keepalive=settings.keepalive)
        except (OSError, ValueError) as exc:
            raise LocationUnavailableError(f"Could not reach MQTT broker {settings.host}:{settings.port}: {exc}") from exc
        client.loop_start()
        self._client = client
        _logger.debug("MQTT network loop started")

    def _stop(self) -> None:
        client = self._client
        self._client = None
        if client is None:
            return
        try:
            _logger.debug("MQTT disconnect requested")
            client.disconnect()
        finally:
            client.loop_stop()
            _logger.debug("MQTT network loop stopped")

    def _dispatch_fix(self, fix: LocationFix) -> None:
        self._last_fix = fix
        pending, self._pending = self._pending, []
        for on_fix, _on_error in pending:
            on_fix(fix)
        for watch in list(self._watches):
            if watch.active:
                watch.on_fix(fix)

    def _dispatch_error(self, exc: Exception) -> None:
        _logger.debug("MQTT location message rejected: %s", exc)
        for watch in list(self._watches):
            if watch.active:
                watch.on_error(exc)

    def _dispatch_unavailable(self, exc: LocationUnavailableError) -> None:
        _logger.warning("MQTT location feed unavailable: %s", exc)
        pending, self._pending = self._pending, []
        watches, self._watches = self._watches, []
        self._stop()
        for _on_fix, on_error in pending:
            on_error(exc)
        for watch in watches:
            if watch.active:
                watch.deactivate()
                watch.on_error(exc)
