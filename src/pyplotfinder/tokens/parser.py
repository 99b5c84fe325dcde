"""Tolerant decoder for text read off plot markers.

Markers in the field carry whatever the printing tool produced, so a
token may be any of:

* a JSON object with ``lat``/``lng`` at the top level, or nested one
  level down (as an object or as a JSON-encoded string);
* key-value pairs such as ``lat:15.49|lng:120.55``;
* a URL with ``?lat=..&lng=..`` query parameters;
* a WKT ``POINT(<lng> <lat>)``.

Each encoding is an independent strategy returning ``None`` when it
does not apply.  :func:`parse_token` tries them in that order and keeps
the first result.  Nothing here raises: an unrecognized token decodes
to an empty :class:`DecodedToken`.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable, Mapping
from typing import Any

from pyplotfinder.ingestion.normalize import safe_float
from pyplotfinder.models.geo import Coordinates
from pyplotfinder.models.token import DecodedToken

_logger = logging.getLogger(__name__)

_NUMBER = r"([+-]?\d+(?:\.\d+)?)"
_KV_LAT_RE = re.compile(rf"(?:^|[|,;\s])lat\s*:\s*{_NUMBER}(?=$|[|,;\s])", re.IGNORECASE)
_KV_LNG_RE = re.compile(rf"(?:^|[|,;\s])lng\s*:\s*{_NUMBER}(?=$|[|,;\s])", re.IGNORECASE)
_URL_LAT_RE = re.compile(rf"[?&]lat={_NUMBER}", re.IGNORECASE)
_URL_LNG_RE = re.compile(rf"[?&]lng={_NUMBER}", re.IGNORECASE)
_WKT_POINT_RE = re.compile(rf"POINT\s*\(\s*{_NUMBER}\s+{_NUMBER}\s*\)", re.IGNORECASE)

Strategy = Callable[[str], DecodedToken | None]


def _coordinates_from(mapping: Mapping[str, Any]) -> Coordinates | None:
    lat = safe_float(mapping.get("lat"))
    lng = safe_float(mapping.get("lng"))
    if lat is None or lng is None:
        return None
    return Coordinates(lat=lat, lng=lng)


def _nested_coordinates(value: Any) -> Coordinates | None:
    if isinstance(value, str):
        text = value.strip()
        if not (text.startswith("{") and text.endswith("}")):
            return None
        try:
            value = json.loads(text)
        except ValueError:
            return None
    if isinstance(value, dict):
        return _coordinates_from(value)
    return None


def decode_json(raw: str) -> DecodedToken | None:
    """JSON object; coordinates top-level or one level down.

    The outer object is always the payload, even when the position came
    from a nested value.  A JSON object without any position still
    decodes, with ``coordinates=None``.
    """
    try:
        obj = json.loads(raw)
    except (ValueError, RecursionError):
        return None
    if not isinstance(obj, dict):
        return None

    coordinates = _coordinates_from(obj)
    if coordinates is None:
        for value in obj.values():
            coordinates = _nested_coordinates(value)
            if coordinates is not None:
                break
    return DecodedToken(coordinates=coordinates, payload=obj, raw=raw)


def _point_token(raw: str, lat_text: str, lng_text: str) -> DecodedToken | None:
    # Overlong digit runs parse to inf; such a token is not a position.
    lat = safe_float(lat_text)
    lng = safe_float(lng_text)
    if lat is None or lng is None:
        return None
    return DecodedToken(coordinates=Coordinates(lat=lat, lng=lng), raw=raw)


def _decode_pair(raw: str, lat_re: re.Pattern[str], lng_re: re.Pattern[str]) -> DecodedToken | None:
    lat_match = lat_re.search(raw)
    lng_match = lng_re.search(raw)
    if lat_match is None or lng_match is None:
        return None
    return _point_token(raw, lat_match.group(1), lng_match.group(1))


def decode_key_value(raw: str) -> DecodedToken | None:
    """``lat:<n>`` and ``lng:<n>`` delimited by ``| , ;`` or whitespace."""
    return _decode_pair(raw, _KV_LAT_RE, _KV_LNG_RE)


def decode_url_query(raw: str) -> DecodedToken | None:
    """``lat=<n>`` and ``lng=<n>`` query-string parameters."""
    return _decode_pair(raw, _URL_LAT_RE, _URL_LNG_RE)


def decode_wkt_point(raw: str) -> DecodedToken | None:
    """WKT ``POINT(<lng> <lat>)``; note longitude comes first."""
    match = _WKT_POINT_RE.search(raw)
    if match is None:
        return None
    return _point_token(raw, match.group(2), match.group(1))


STRATEGIES: tuple[Strategy, ...] = (
    decode_json,
    decode_key_value,
    decode_url_query,
    decode_wkt_point,
)


def parse_token(token: str | None) -> DecodedToken:
    """Decode *token* with the first strategy that recognizes it."""
    if token is None:
        return DecodedToken()
    raw = str(token).strip()
    if not raw:
        return DecodedToken()

    for strategy in STRATEGIES:
        decoded = strategy(raw)
        if decoded is not None:
            _logger.debug("Token decoded by %s coordinates=%s", strategy.__name__, decoded.coordinates)
            return decoded

    _logger.debug("Token carries no recognized encoding (%d chars)", len(raw))
    return DecodedToken(raw=raw)
