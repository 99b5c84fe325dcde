"""Location feed and arbitration models."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from pyplotfinder.ingestion.normalize import safe_float
from pyplotfinder.models._base import PlotFinderBaseModel
from pyplotfinder.models.geo import Coordinates


class LocationSource(StrEnum):
    REAL = "real"
    SIMULATED = "simulated"


class ArbiterState(StrEnum):
    DISABLED = "disabled"
    SIMULATED_ACTIVE = "simulated_active"
    REAL_PENDING = "real_pending"
    REAL_ACTIVE = "real_active"


class LocationFix(PlotFinderBaseModel):
    """A single position emitted by a feed.

    Optional fields are ``None`` when the feed did not report them.
    """

    lat: float
    lng: float = Field(validation_alias=AliasChoices("lng", "lon", "longitude"))
    accuracy: float | None = Field(default=None, validation_alias=AliasChoices("accuracy", "acc"))
    speed: float | None = None
    heading: float | None = Field(default=None, validation_alias=AliasChoices("heading", "cog", "course"))

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)

    @field_validator("accuracy", "speed", "heading", mode="before")
    @classmethod
    def _coerce_optional(cls, value: Any) -> float | None:
        return safe_float(value)


class LocationSample(BaseModel):
    """Audit-log entry for one accepted fix.

    Serialised with camelCase keys (``timestampMs``, ``isoTime``) in
    the diagnostic export.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    seq: int
    lat: float
    lng: float
    accuracy: float | None = None
    speed: float | None = None
    heading: float | None = None
    timestamp_ms: int
    iso_time: str
    source: LocationSource

    @classmethod
    def from_fix(cls, fix: LocationFix, *, seq: int, source: LocationSource, timestamp_ms: int) -> LocationSample:
        stamp = datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)
        return cls(
            seq=seq,
            lat=fix.lat,
            lng=fix.lng,
            accuracy=fix.accuracy,
            speed=fix.speed,
            heading=fix.heading,
            timestamp_ms=timestamp_ms,
            iso_time=stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            source=source,
        )


class OriginState(BaseModel):
    """Snapshot of the arbiter's origin bookkeeping."""

    model_config = ConfigDict(frozen=True)

    mode: LocationSource
    consent_granted: bool
    current_fix: Coordinates | None = None


class SimulatedSeries(PlotFinderBaseModel):
    """A named, scripted walk used in place of the device location."""

    id: str
    label: str = ""
    points: tuple[Coordinates, ...] = ()
