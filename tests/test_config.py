from __future__ import annotations

import os

import pytest

from pyplotfinder._constants import OSRM_BASE_URL, REFERENCE_LAT, REFERENCE_LNG
from pyplotfinder.config import MqttSettings, PlotFinderConfig
from pyplotfinder.exceptions import PlotFinderConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("PLOTFINDER_"):
            monkeypatch.delenv(key)


def test_defaults() -> None:
    config = PlotFinderConfig.from_env()
    assert config.reference_point.as_tuple() == (REFERENCE_LAT, REFERENCE_LNG)
    assert config.origin_radius_m == 10_000.0
    assert config.routing_base_url == OSRM_BASE_URL
    assert config.routing_profile == "foot"
    assert config.sample_log_capacity == 50
    assert config.records_url is None
    assert config.mqtt.configured is False


def test_env_values_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLOTFINDER_ORIGIN_RADIUS_M", "2500")
    monkeypatch.setenv("PLOTFINDER_RECORDS_URL", "https://records.example.org/api/burials")
    monkeypatch.setenv("PLOTFINDER_SIMULATED_INTERVAL_MS", "500")
    monkeypatch.setenv("PLOTFINDER_MQTT_HOST", "broker.example.org")
    monkeypatch.setenv("PLOTFINDER_MQTT_TOPIC", "owntracks/visitor/phone")
    monkeypatch.setenv("PLOTFINDER_MQTT_PORT", "1883")
    monkeypatch.setenv("PLOTFINDER_MQTT_TLS", "off")

    config = PlotFinderConfig.from_env()
    assert config.origin_radius_m == 2500.0
    assert config.records_url == "https://records.example.org/api/burials"
    assert config.simulated_interval_ms == 500
    assert config.mqtt == MqttSettings(host="broker.example.org", port=1883, topic="owntracks/visitor/phone", tls=False)
    assert config.mqtt.configured is True


def test_overrides_take_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLOTFINDER_ROUTING_PROFILE", "driving")
    monkeypatch.setenv("PLOTFINDER_MQTT_HOST", "env-host")

    config = PlotFinderConfig.from_env(routing_profile="foot", mqtt={"host": "override-host", "topic": "t"})
    assert config.routing_profile == "foot"
    assert config.mqtt.host == "override-host"
    assert config.mqtt.topic == "t"


def test_invalid_numeric_env_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PLOTFINDER_SAMPLE_LOG_CAPACITY", "fifty")
    with pytest.raises(PlotFinderConfigError, match="PLOTFINDER_SAMPLE_LOG_CAPACITY"):
        PlotFinderConfig.from_env()


@pytest.mark.parametrize(
    "overrides",
    [{"origin_radius_m": 0}, {"sample_log_capacity": 0}, {"reference_lat": 123.0}, {"routing_timeout": -1}],
)
def test_validation(overrides: dict[str, object]) -> None:
    with pytest.raises(PlotFinderConfigError):
        PlotFinderConfig.from_env(**overrides)
