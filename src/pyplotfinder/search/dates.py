"""Calendar-day comparison used by the search prefilter."""

from __future__ import annotations

from datetime import date, datetime


def calendar_day(value: date | datetime | str) -> date | None:
    """Calendar day of *value* as written, or ``None`` if it does not parse."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def same_date(a: date | datetime | str | None, b: date | datetime | str | None) -> bool:
    """Whether *a* and *b* fall on the same calendar day.

    Timestamps are compared on the Y-M-D they were written with; no
    time-zone conversion happens.  When either side does not parse, the
    first ten characters are compared literally.
    """
    if not a or not b:
        return False
    day_a = calendar_day(a)
    day_b = calendar_day(b)
    if day_a is None or day_b is None:
        return str(a)[:10] == str(b)[:10]
    return day_a == day_b
