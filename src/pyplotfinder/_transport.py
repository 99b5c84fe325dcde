"""JSON-over-HTTP transport shared by the routing engine and record source."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyplotfinder._constants import USER_AGENT
from pyplotfinder.exceptions import PlotFinderTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the routing and record modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`JsonTransport`) concrete.
    """

    async def get_json(self, url: str, params: Mapping[str, str] | None = None) -> Any:
        ...


class JsonTransport:
    """GET requests returning decoded JSON bodies."""

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float = 10.0) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def get_json(self, url: str, params: Mapping[str, str] | None = None) -> Any:
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }

        _logger.debug("GET %s params=%s", url, dict(params or {}))

        try:
            async with self._http.get(url, params=params, headers=headers, timeout=self._timeout) as resp:
                text = await resp.text()
                status = resp.status
        except aiohttp.ClientError as exc:
            raise PlotFinderTransportError(f"Request to {url} failed: {exc}", endpoint=url) from exc
        except TimeoutError as exc:
            raise PlotFinderTransportError(f"Request to {url} timed out", endpoint=url) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            if status != 200:
                raise PlotFinderTransportError(
                    f"HTTP {status} from {url}: {text[:200]}",
                    status_code=status,
                    endpoint=url,
                ) from exc
            raise PlotFinderTransportError(f"Invalid JSON from {url}: {text[:200]}", endpoint=url) from exc

        # OSRM answers 400 with a JSON error body; let the caller read its code.
        if status != 200 and not (400 <= status < 500 and isinstance(body, dict) and "code" in body):
            raise PlotFinderTransportError(
                f"HTTP {status} from {url}: {text[:200]}",
                status_code=status,
                endpoint=url,
            )
        return body
