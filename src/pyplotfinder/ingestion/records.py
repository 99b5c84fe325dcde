"""Record-source row ingestion."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from pyplotfinder.models.record import BurialRecord

_logger = logging.getLogger(__name__)


def parse_records(rows: Iterable[Any]) -> list[BurialRecord]:
    """Validate raw rows into :class:`BurialRecord` objects.

    Rows that are not objects or fail validation are skipped so one bad
    row cannot hide the rest of the cemetery.
    """
    records: list[BurialRecord] = []
    skipped = 0
    for row in rows:
        if isinstance(row, BurialRecord):
            records.append(row)
            continue
        if not isinstance(row, dict):
            skipped += 1
            continue
        try:
            records.append(BurialRecord.model_validate(row))
        except ValidationError:
            skipped += 1
            _logger.debug("Skipping invalid burial record row id=%s", row.get("id"), exc_info=True)
    if skipped:
        _logger.warning("Skipped %d burial record rows that failed validation", skipped)
    return records
