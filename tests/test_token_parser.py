from __future__ import annotations

import json

import pytest

from pyplotfinder.models.geo import Coordinates
from pyplotfinder.tokens.parser import (
    decode_json,
    decode_key_value,
    decode_url_query,
    decode_wkt_point,
    parse_token,
)


def test_json_token_with_top_level_coordinates() -> None:
    decoded = parse_token('{"lat":15.49,"lng":120.55,"deceased_name":"X"}')
    assert decoded.coordinates == Coordinates(lat=15.49, lng=120.55)
    assert decoded.payload is not None
    assert decoded.payload["deceased_name"] == "X"


def test_json_token_with_nested_object() -> None:
    token = json.dumps({"plot": {"lat": 1.5, "lng": 2.5}, "deceased_name": "Y"})
    decoded = parse_token(token)
    assert decoded.coordinates == Coordinates(lat=1.5, lng=2.5)
    # the outer object stays the payload
    assert decoded.payload == {"plot": {"lat": 1.5, "lng": 2.5}, "deceased_name": "Y"}


def test_json_token_with_nested_json_string() -> None:
    token = json.dumps({"location": json.dumps({"lat": 10, "lng": 20}), "id": 3})
    decoded = parse_token(token)
    assert decoded.coordinates == Coordinates(lat=10.0, lng=20.0)
    assert decoded.payload is not None
    assert decoded.payload["id"] == 3


def test_json_token_accepts_numeric_strings() -> None:
    decoded = parse_token('{"lat":"15.49","lng":"120.55"}')
    assert decoded.coordinates == Coordinates(lat=15.49, lng=120.55)


def test_json_token_without_position_keeps_payload() -> None:
    decoded = parse_token('{"deceased_name": "Z", "lat": true, "lng": 1}')
    assert decoded.coordinates is None
    assert decoded.payload == {"deceased_name": "Z", "lat": True, "lng": 1}


def test_key_value_token() -> None:
    decoded = parse_token("lat:15.49|lng:120.55")
    assert decoded.coordinates == Coordinates(lat=15.49, lng=120.55)
    assert decoded.payload is None
    assert decoded.raw == "lat:15.49|lng:120.55"


@pytest.mark.parametrize(
    "token",
    ["LAT : 15.49 ; LNG : 120.55", "lng:120.55,lat:15.49", "lat:+15.49 lng:120.55"],
)
def test_key_value_token_variants(token: str) -> None:
    assert parse_token(token).coordinates == Coordinates(lat=15.49, lng=120.55)


def test_key_value_negative_numbers() -> None:
    decoded = decode_key_value("lat:-33.8688|lng:-151.2093")
    assert decoded is not None
    assert decoded.coordinates == Coordinates(lat=-33.8688, lng=-151.2093)


def test_url_query_token() -> None:
    decoded = parse_token("https://example.org/plots/42?lat=15.49&lng=120.55&ref=qr")
    assert decoded.coordinates == Coordinates(lat=15.49, lng=120.55)
    assert decoded.payload is None


def test_wkt_point_swaps_axis_order() -> None:
    decoded = parse_token("POINT(120.55 15.49)")
    assert decoded.coordinates == Coordinates(lat=15.49, lng=120.55)


def test_wkt_point_is_case_and_space_tolerant() -> None:
    decoded = decode_wkt_point("point (  120.55    15.49 )")
    assert decoded is not None
    assert decoded.coordinates == Coordinates(lat=15.49, lng=120.55)


@pytest.mark.parametrize("token", ["hello world", "PLOT-A-17", "[1, 2]", '"just a string"'])
def test_unstructured_token_decodes_to_nothing(token: str) -> None:
    decoded = parse_token(token)
    assert decoded.coordinates is None
    assert decoded.payload is None
    assert decoded.raw == token
    assert not decoded.has_coordinates


def test_malformed_json_degrades_without_raising() -> None:
    decoded = parse_token('{"lat": 15.49, "lng":')
    assert decoded.coordinates is None
    assert decoded.payload is None


def test_deeply_nested_json_does_not_raise() -> None:
    decoded = parse_token("[" * 100_000 + "]" * 100_000)
    assert decoded.coordinates is None


def test_overlong_number_is_not_a_position() -> None:
    decoded = parse_token("lat:1" + "9" * 400 + "|lng:2")
    assert not decoded.has_coordinates


@pytest.mark.parametrize("token", [None, "", "   "])
def test_blank_token(token: str | None) -> None:
    decoded = parse_token(token)
    assert decoded.coordinates is None
    assert decoded.payload is None


def test_token_is_stripped_before_decoding() -> None:
    decoded = parse_token("  POINT(120.55 15.49)\n")
    assert decoded.raw == "POINT(120.55 15.49)"
    assert decoded.has_coordinates


def test_strategies_return_none_when_not_applicable() -> None:
    assert decode_json("lat:1|lng:2") is None
    assert decode_key_value("POINT(1 2)") is None
    assert decode_url_query("lat:1|lng:2") is None
    assert decode_wkt_point('{"lat": 1, "lng": 2}') is None
