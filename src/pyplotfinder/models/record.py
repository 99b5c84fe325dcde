"""Burial record and search result models."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pyplotfinder.models._base import PlotFinderBaseModel


class BurialRecord(PlotFinderBaseModel):
    """A burial record as served by the record source.

    Read-only from this library's point of view.  Dates are kept as the
    strings the source supplied; see :func:`pyplotfinder.search.dates.same_date`.

    Parameters
    ----------
    id : str
        Record identifier.
    deceased_name : str
        Full name as entered by staff.
    birth_date, death_date : str or None
        Calendar dates, usually ``YYYY-MM-DD`` or an ISO timestamp.
    plot_id : str or None
        Plot the record is attached to.
    marker_token : str or None
        Raw text encoded on the plot marker (API field ``qr_token``).
    raw : dict
        Original row.
    """

    id: str
    deceased_name: str = ""
    birth_date: str | None = None
    death_date: str | None = None
    plot_id: str | None = None
    marker_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("marker_token", "qr_token", "markerToken", "qrToken"),
    )
    raw: dict[str, Any] = Field(default_factory=dict)

    @field_validator("id", "plot_id", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("birth_date", "death_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        # date/datetime objects from a driver keep their ISO spelling
        if hasattr(value, "isoformat"):
            return value.isoformat()
        return value


class NameQuery(PlotFinderBaseModel):
    """User-entered name; either half may be blank."""

    first_name: str = ""
    last_name: str = ""

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class MatchClassification(StrEnum):
    EXACT = "exact"
    CLOSE = "close"
    NONE = "none"


class SearchStatus(StrEnum):
    SELECTED = "selected"
    AMBIGUOUS = "ambiguous"
    NO_MATCH = "no_match"
    INVALID_DATES = "invalid_dates"


class SearchOutcome(PlotFinderBaseModel):
    """Result of a date + name search.

    ``selected`` is set only when the selection policy picked a single
    record; otherwise ``exact`` and ``close`` are presented to the user.
    """

    status: SearchStatus
    exact: tuple[BurialRecord, ...] = ()
    close: tuple[BurialRecord, ...] = ()
    selected: BurialRecord | None = None
    message: str | None = None
