"""Client configuration for pyplotfinder."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any

from pyplotfinder._constants import (
    DEFAULT_SIMULATED_INTERVAL_MS,
    LIVE_REPORT_INTERVAL_S,
    ORIGIN_RADIUS_M,
    OSRM_BASE_URL,
    OSRM_PROFILE,
    REFERENCE_LAT,
    REFERENCE_LNG,
    SAMPLE_LOG_CAPACITY,
)
from pyplotfinder.exceptions import PlotFinderConfigError
from pyplotfinder.models.geo import Coordinates


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class MqttSettings:
    """Broker settings for the device location feed.

    The feed is considered unavailable when ``host`` or ``topic`` is empty.
    """

    host: str = ""
    port: int = 8883
    topic: str = ""
    username: str | None = None
    password: str | None = None
    tls: bool = True
    keepalive: int = 60
    client_id: str = "pyplotfinder"

    @property
    def configured(self) -> bool:
        return bool(self.host and self.topic)


@dataclasses.dataclass(frozen=True)
class PlotFinderConfig:
    """Library configuration.

    Parameters
    ----------
    reference_lat, reference_lng : float
        Fixed fallback origin (the facility entrance).
    origin_radius_m : float
        Live positions farther than this from the reference point are
        replaced by the reference point when routing.
    routing_base_url : str
        OSRM service root.
    routing_profile : str
        OSRM profile; visitors walk, so ``"foot"``.
    routing_timeout : float
        Per-request HTTP timeout in seconds.
    records_url : str or None
        Endpoint returning the burial records as a JSON list.
    sample_log_capacity : int
        Number of location samples kept for diagnostics.
    simulated_interval_ms : int
        Emission interval of the simulated feed (clamped to >= 250 ms).
    live_report_interval : float
        Seconds between "live position" debug lines while real tracking
        is running.  ``0`` disables the report.
    mqtt : MqttSettings
        Device location feed settings.
    """

    reference_lat: float = REFERENCE_LAT
    reference_lng: float = REFERENCE_LNG
    origin_radius_m: float = ORIGIN_RADIUS_M
    routing_base_url: str = OSRM_BASE_URL
    routing_profile: str = OSRM_PROFILE
    routing_timeout: float = 10.0
    records_url: str | None = None
    sample_log_capacity: int = SAMPLE_LOG_CAPACITY
    simulated_interval_ms: int = DEFAULT_SIMULATED_INTERVAL_MS
    live_report_interval: float = LIVE_REPORT_INTERVAL_S
    mqtt: MqttSettings = dataclasses.field(default_factory=MqttSettings)

    @property
    def reference_point(self) -> Coordinates:
        return Coordinates(lat=self.reference_lat, lng=self.reference_lng)

    @classmethod
    def from_env(cls, **overrides: Any) -> PlotFinderConfig:
        """Create configuration from environment variables.

        Reads optional ``PLOTFINDER_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        PlotFinderConfig
            Populated configuration.
        """
        env = os.environ

        mqtt_kwargs: dict[str, Any] = {}
        _ENV_MQTT_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "PLOTFINDER_MQTT_HOST": ("host", str),
            "PLOTFINDER_MQTT_PORT": ("port", int),
            "PLOTFINDER_MQTT_TOPIC": ("topic", str),
            "PLOTFINDER_MQTT_USERNAME": ("username", str),
            "PLOTFINDER_MQTT_PASSWORD": ("password", str),
            "PLOTFINDER_MQTT_KEEPALIVE": ("keepalive", int),
            "PLOTFINDER_MQTT_CLIENT_ID": ("client_id", str),
        }
        for env_key, (field_name, convert) in _ENV_MQTT_MAP.items():
            val = env.get(env_key)
            if val is not None:
                mqtt_kwargs[field_name] = _convert(env_key, val, convert)
        if "PLOTFINDER_MQTT_TLS" in env:
            mqtt_kwargs["tls"] = _env_bool(env.get("PLOTFINDER_MQTT_TLS"), True)

        # Allow overriding mqtt fields via a nested dict
        mqtt_overrides = overrides.pop("mqtt", None)
        if isinstance(mqtt_overrides, dict):
            mqtt_kwargs.update(mqtt_overrides)
        elif isinstance(mqtt_overrides, MqttSettings):
            mqtt_kwargs = dataclasses.asdict(mqtt_overrides)

        mqtt = MqttSettings(**mqtt_kwargs) if mqtt_kwargs else MqttSettings()

        _ENV_CONFIG_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "PLOTFINDER_REFERENCE_LAT": ("reference_lat", float),
            "PLOTFINDER_REFERENCE_LNG": ("reference_lng", float),
            "PLOTFINDER_ORIGIN_RADIUS_M": ("origin_radius_m", float),
            "PLOTFINDER_ROUTING_BASE_URL": ("routing_base_url", str),
            "PLOTFINDER_ROUTING_PROFILE": ("routing_profile", str),
            "PLOTFINDER_ROUTING_TIMEOUT": ("routing_timeout", float),
            "PLOTFINDER_RECORDS_URL": ("records_url", str),
            "PLOTFINDER_SAMPLE_LOG_CAPACITY": ("sample_log_capacity", int),
            "PLOTFINDER_SIMULATED_INTERVAL_MS": ("simulated_interval_ms", int),
            "PLOTFINDER_LIVE_REPORT_INTERVAL": ("live_report_interval", float),
        }
        config_kwargs: dict[str, Any] = {"mqtt": mqtt}
        for env_key, (field_name, convert) in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _convert(env_key, val, convert)

        config_kwargs.update(overrides)

        config = cls(**config_kwargs)
        config.validate()
        return config

    def validate(self) -> None:
        """Basic sanity checks."""
        if not self.reference_point.is_valid:
            raise PlotFinderConfigError(
                f"reference point ({self.reference_lat}, {self.reference_lng}) is not a valid coordinate"
            )
        if self.origin_radius_m <= 0:
            raise PlotFinderConfigError("origin_radius_m must be > 0")
        if self.sample_log_capacity <= 0:
            raise PlotFinderConfigError("sample_log_capacity must be > 0")
        if self.routing_timeout <= 0:
            raise PlotFinderConfigError("routing_timeout must be > 0")


def _convert(env_key: str, value: str, convert: Callable[[str], Any]) -> Any:
    try:
        return convert(value.strip())
    except ValueError as exc:
        raise PlotFinderConfigError(f"{env_key}={value!r} is not a valid value") from exc
