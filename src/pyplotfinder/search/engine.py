"""Date-prefiltered name search and the auto-selection policy."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime

from pyplotfinder.models.record import BurialRecord, MatchClassification, NameQuery, SearchOutcome, SearchStatus
from pyplotfinder.search.dates import same_date
from pyplotfinder.search.names import classify

_logger = logging.getLogger(__name__)

MISSING_DATES_MESSAGE = "Please provide both Birth Date and Death Date."
NO_DATE_MATCH_MESSAGE = "No records match the given Birth and Death dates."
NO_NAME_MATCH_MESSAGE = "No records found for those dates and name."

DateInput = date | datetime | str | None


def select_candidates(exact: Sequence[BurialRecord], close: Sequence[BurialRecord]) -> SearchOutcome:
    """Apply the selection policy to classified candidates.

    One exact match wins outright.  With no exact match a single close
    match is selected.  Anything else is left for the user to pick.
    """
    if len(exact) == 1:
        return SearchOutcome(status=SearchStatus.SELECTED, exact=tuple(exact), close=tuple(close), selected=exact[0])
    if not exact and len(close) == 1:
        return SearchOutcome(status=SearchStatus.SELECTED, close=tuple(close), selected=close[0])
    if not exact and not close:
        return SearchOutcome(status=SearchStatus.NO_MATCH, message=NO_NAME_MATCH_MESSAGE)
    return SearchOutcome(status=SearchStatus.AMBIGUOUS, exact=tuple(exact), close=tuple(close))


def search_records(
    records: Iterable[BurialRecord],
    query: NameQuery,
    birth_date: DateInput,
    death_date: DateInput,
) -> SearchOutcome:
    """Find the record matching exact life-dates and an approximate name."""
    if not birth_date or not death_date:
        return SearchOutcome(status=SearchStatus.INVALID_DATES, message=MISSING_DATES_MESSAGE)

    date_matched = [
        record
        for record in records
        if same_date(record.birth_date, birth_date) and same_date(record.death_date, death_date)
    ]
    if not date_matched:
        return SearchOutcome(status=SearchStatus.NO_MATCH, message=NO_DATE_MATCH_MESSAGE)

    exact: list[BurialRecord] = []
    close: list[BurialRecord] = []
    for record in date_matched:
        classification = classify(query, record.deceased_name)
        if classification is MatchClassification.EXACT:
            exact.append(record)
        elif classification is MatchClassification.CLOSE:
            close.append(record)

    outcome = select_candidates(exact, close)
    _logger.debug(
        "Search dates=%s/%s candidates=%d exact=%d close=%d status=%s",
        birth_date,
        death_date,
        len(date_matched),
        len(exact),
        len(close),
        outcome.status,
    )
    return outcome
