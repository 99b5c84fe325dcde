"""Burial record source.

The record service answers ``GET <records_url>`` with either a JSON list
of rows or an object wrapping the list under ``data`` or ``records``.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from pyplotfinder._transport import Transport
from pyplotfinder.exceptions import PlotFinderTransportError
from pyplotfinder.ingestion.records import parse_records
from pyplotfinder.models.record import BurialRecord

_logger = logging.getLogger(__name__)


class RecordSource(Protocol):
    """Pull interface returning the searchable burial records."""

    async def fetch_records(self) -> list[BurialRecord]: ...


def _extract_rows(body: Any, url: str) -> list[Any]:
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in ("data", "records"):
            rows = body.get(key)
            if isinstance(rows, list):
                return rows
    raise PlotFinderTransportError(f"Record response from {url} is not a list of rows", endpoint=url)


class HttpRecordSource:
    """Record source backed by a JSON endpoint."""

    def __init__(self, transport: Transport, url: str) -> None:
        self._transport = transport
        self._url = url

    async def fetch_records(self) -> list[BurialRecord]:
        body = await self._transport.get_json(self._url)
        records = parse_records(_extract_rows(body, self._url))
        _logger.debug("Fetched %d burial records from %s", len(records), self._url)
        return records


class StaticRecordSource:
    """Serves a fixed record list, for offline use and tests."""

    def __init__(self, rows: list[Any]) -> None:
        self._records = parse_records(rows)

    async def fetch_records(self) -> list[BurialRecord]:
        return list(self._records)
