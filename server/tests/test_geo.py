"""Tests for geo primitives."""

from __future__ import annotations

import math

import pytest

from areawatch.core.geo import (
    EARTH_RADIUS_M,
    PH_CENTER,
    _fnv1a_32,
    approx_coordinates,
    bounding_box,
    centroid,
    haversine_m,
    normalize_lat_lng,
    valid_point,
)
from conftest import BASE_LAT, BASE_LNG, north_of


def test_haversine_zero_distance():
    assert haversine_m((BASE_LAT, BASE_LNG), (BASE_LAT, BASE_LNG)) == 0.0


def test_haversine_uses_equatorial_radius():
    # One degree along a meridian is exactly R * pi / 180.
    d = haversine_m((10.0, 121.0), (11.0, 121.0))
    assert d == pytest.approx(EARTH_RADIUS_M * math.pi / 180, rel=1e-9)
    assert d == pytest.approx(111_319.49, abs=0.01)


def test_haversine_symmetric():
    a = (14.5995, 120.9842)
    b = (10.3157, 123.8854)
    assert haversine_m(a, b) == pytest.approx(haversine_m(b, a))


def test_haversine_along_meridian_matches_offset():
    assert haversine_m((BASE_LAT, BASE_LNG), north_of(2500)) == pytest.approx(2500, abs=1e-6)


@pytest.mark.parametrize("coords", [
    None,
    (float("nan"), 121.0),
    (14.0, float("inf")),
    (14.0,),
    ("abc", 121.0),
    "14,121",
])
def test_valid_point_rejects_unusable(coords):
    assert valid_point(coords) is None


def test_valid_point_accepts_list():
    assert valid_point([14, 121]) == (14.0, 121.0)


def test_bounding_box_single_point_is_closed_padded_ring():
    box = bounding_box([(14.0, 121.0)])
    polygon = box.to_polygon()

    ring = polygon["coordinates"][0]
    assert polygon["type"] == "Polygon"
    assert len(ring) == 5
    assert ring[0] == ring[-1]
    assert ring[0] == [pytest.approx(120.99), pytest.approx(13.99)]
    assert ring[2] == [pytest.approx(121.01), pytest.approx(14.01)]
    assert box.max_lat - box.min_lat == pytest.approx(0.02)
    assert box.max_lng - box.min_lng == pytest.approx(0.02)


def test_bounding_box_spans_all_points():
    box = bounding_box([(14.0, 121.0), (14.5, 120.5), (13.8, 121.2)])
    assert box.min_lat == pytest.approx(13.79)
    assert box.max_lat == pytest.approx(14.51)
    assert box.min_lng == pytest.approx(120.49)
    assert box.max_lng == pytest.approx(121.21)


def test_bounding_box_empty_and_non_finite():
    assert bounding_box([]) is None
    assert bounding_box([(float("nan"), 121.0), None]) is None


def test_centroid_is_mean():
    assert centroid([(14.0, 121.0), (15.0, 122.0)]) == pytest.approx((14.5, 121.5))


def test_centroid_ignores_invalid_points():
    assert centroid([(14.0, 121.0), (float("nan"), 0.0), None]) == (14.0, 121.0)


def test_centroid_empty_falls_back_to_ph_center():
    assert centroid([]) == PH_CENTER == (12.8797, 121.774)


def test_normalize_swaps_lng_lat_pairs():
    assert normalize_lat_lng((121.0, 14.0)) == (14.0, 121.0)
    assert normalize_lat_lng((14.0, 121.0)) == (14.0, 121.0)
    # Outside the Philippines: left alone.
    assert normalize_lat_lng((48.85, 2.35)) == (48.85, 2.35)


def test_approx_coordinates_exact_and_partial_match():
    assert approx_coordinates("Cebu City, Cebu") == (10.3157, 123.8854)
    assert approx_coordinates("Marikina") == (14.6507, 121.1029)


def test_approx_coordinates_is_deterministic():
    first = approx_coordinates("Barangay San Roque, somewhere")
    second = approx_coordinates("  barangay san roque, SOMEWHERE ")
    assert first == approx_coordinates("Barangay San Roque, somewhere")
    assert first == second
    assert abs(first[0] - PH_CENTER[0]) <= 0.45
    assert abs(first[1] - PH_CENTER[1]) <= 0.45


def test_fnv1a_hashes_utf16_code_units():
    assert _fnv1a_32("") == 0x811C9DC5
    assert _fnv1a_32("a") == 0xE40C292C
    # Outside the BMP: hashed as the surrogate pair 0xD83D 0xDE00.
    assert _fnv1a_32("\U0001F600") == 0xCB31C4B8
