"""Marker token decoding."""

from pyplotfinder.tokens.display import display_entries
from pyplotfinder.tokens.parser import (
    STRATEGIES,
    decode_json,
    decode_key_value,
    decode_url_query,
    decode_wkt_point,
    parse_token,
)

__all__ = [
    "STRATEGIES",
    "decode_json",
    "decode_key_value",
    "decode_url_query",
    "decode_wkt_point",
    "display_entries",
    "parse_token",
]
