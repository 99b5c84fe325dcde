"""Human-readable rows for a decoded token payload."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pyplotfinder.ingestion.normalize import safe_float
from pyplotfinder.models.token import DisplayEntry
from pyplotfinder.search.dates import calendar_day

EMPTY_VALUE = "—"

# Internal bookkeeping keys that mean nothing to a visitor.
_OMITTED_KEYS: frozenset[str] = frozenset(
    {
        "_type",
        "id",
        "uid",
        "plot_id",
        "family_contact",
        "is_active",
        "lat",
        "lng",
        "created_at",
        "updated_at",
        "headstone_type",
        "memorial_text",
    }
)

_LABELS: dict[str, str] = {
    "deceased_name": "Deceased Name",
    "birth_date": "Birth Date",
    "death_date": "Death Date",
    "burial_date": "Burial Date",
}

_DATE_KEY_RE = re.compile(r"(_date$|^created_at$|^updated_at$)")


def label_for(key: str) -> str:
    label = _LABELS.get(key)
    if label is not None:
        return label
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), key.replace("_", " "))


def format_date(value: Any) -> str:
    """``Jan 02, 2020`` for parseable dates, the input unchanged otherwise."""
    day = calendar_day(value)
    if day is None:
        return str(value)
    return day.strftime("%b %d, %Y")


def format_value(key: str, value: Any) -> str:
    if value is None or value == "":
        return EMPTY_VALUE
    if key in ("lat", "lng"):
        number = safe_float(value)
        return f"{number:.6f}" if number is not None else str(value)
    if _DATE_KEY_RE.search(key):
        return format_date(value)
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def display_entries(payload: Mapping[str, Any] | None) -> list[DisplayEntry]:
    """Visitor-facing rows of *payload*, in payload order."""
    if not payload:
        return []
    return [
        DisplayEntry(key=key, label=label_for(key), value=format_value(key, value))
        for key, value in payload.items()
        if key not in _OMITTED_KEYS
    ]
