"""Geo primitives on (lat, lng) pairs: distance, bounding box, centroid.

Pure functions, no state. Non-finite or malformed coordinates are treated
as absent everywhere in this module.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

# WGS84 equatorial radius (not the mean radius).
EARTH_RADIUS_M = 6_378_137.0

# Degrees added to every edge of an area bounding box (~1.1 km).
BOUNDS_PADDING_DEG = 0.01

# Geographic center of the Philippines, used when there is nothing to average.
PH_CENTER: tuple[float, float] = (12.8797, 121.774)

# Loose bounds used to detect (lng, lat) pairs that were stored swapped.
PH_LAT_RANGE = (4.4, 21.6)
PH_LNG_RANGE = (116.0, 127.3)

# Known places for the approximate-location fallback.
LOCATION_COORDINATES: dict[str, tuple[float, float]] = {
    "Metro Manila": (14.5995, 120.9842),
    "Marikina, Metro Manila": (14.6507, 121.1029),
    "Quezon City, Metro Manila": (14.676, 121.0437),
    "Tacloban City, Leyte": (11.2445, 125.0032),
    "Cebu City, Cebu": (10.3157, 123.8854),
    "Davao City, Davao del Sur": (7.1907, 125.4553),
    "Albay (Mayon area)": (13.2578, 123.6856),
}


def valid_point(coords) -> tuple[float, float] | None:
    """Return coords as a (lat, lng) float pair, or None if unusable."""
    if coords is None:
        return None
    try:
        lat, lng = coords
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return lat, lng


def haversine_m(a: tuple[float, float], b: tuple[float, float]) -> float:
    """Great-circle distance in meters between two (lat, lng) points."""
    rlat1, rlat2 = math.radians(a[0]), math.radians(b[0])
    dlat = math.radians(b[0] - a[0])
    dlng = math.radians(b[1] - a[1])
    h = math.sin(dlat / 2) ** 2 + math.cos(rlat1) * math.cos(rlat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float

    def to_polygon(self) -> dict:
        """GeoJSON Polygon with a closed ring (first point repeated last)."""
        return {
            "type": "Polygon",
            "coordinates": [
                [
                    [self.min_lng, self.min_lat],
                    [self.max_lng, self.min_lat],
                    [self.max_lng, self.max_lat],
                    [self.min_lng, self.max_lat],
                    [self.min_lng, self.min_lat],
                ],
            ],
        }


def bounding_box(points: Iterable, padding: float = BOUNDS_PADDING_DEG) -> BoundingBox | None:
    """Padded axis-aligned box around the valid points, or None if there are none."""
    valid = [p for p in (valid_point(p) for p in points) if p is not None]
    if not valid:
        return None

    lats = [p[0] for p in valid]
    lngs = [p[1] for p in valid]
    return BoundingBox(
        min_lat=min(lats) - padding,
        max_lat=max(lats) + padding,
        min_lng=min(lngs) - padding,
        max_lng=max(lngs) + padding,
    )


def centroid(points: Iterable) -> tuple[float, float]:
    """Arithmetic mean of the valid points; PH_CENTER if there are none."""
    valid = [p for p in (valid_point(p) for p in points) if p is not None]
    if not valid:
        return PH_CENTER
    lat_sum = sum(p[0] for p in valid)
    lng_sum = sum(p[1] for p in valid)
    return lat_sum / len(valid), lng_sum / len(valid)


def _in_range(value: float, bounds: tuple[float, float]) -> bool:
    return bounds[0] <= value <= bounds[1]


def normalize_lat_lng(coords: tuple[float, float]) -> tuple[float, float]:
    """Swap a pair that is clearly (lng, lat) for a Philippine location."""
    a, b = coords
    if _in_range(a, PH_LAT_RANGE) and _in_range(b, PH_LNG_RANGE):
        return a, b
    if _in_range(a, PH_LNG_RANGE) and _in_range(b, PH_LAT_RANGE):
        return b, a
    return a, b


def _fnv1a_32(text: str) -> int:
    """FNV-1a over UTF-16 code units, matching JavaScript charCodeAt hashing."""
    data = text.encode("utf-16-le")
    h = 0x811C9DC5
    for i in range(0, len(data), 2):
        h ^= data[i] | (data[i + 1] << 8)
        h = (h * 0x01000193) & 0xFFFFFFFF
    return h


def _mulberry32(seed: int):
    state = seed & 0xFFFFFFFF

    def _next() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & 0xFFFFFFFF
        t = state
        t = ((t ^ (t >> 15)) * (t | 1)) & 0xFFFFFFFF
        t = (t ^ ((t + (((t ^ (t >> 7)) * (t | 61)) & 0xFFFFFFFF)) & 0xFFFFFFFF)) & 0xFFFFFFFF
        return ((t ^ (t >> 14)) & 0xFFFFFFFF) / 4294967296

    return _next


def approx_coordinates(location: str) -> tuple[float, float]:
    """Deterministic approximate location for free-text place names.

    Exact gazetteer match first, then a substring match either way, then a
    stable pseudo-random offset (within ±0.45°) around PH_CENTER so the same
    text always lands on the same spot.
    """
    if location in LOCATION_COORDINATES:
        return LOCATION_COORDINATES[location]

    lowered = location.lower()
    for key, coords in LOCATION_COORDINATES.items():
        key_lower = key.lower()
        if key_lower in lowered or lowered in key_lower:
            return coords

    rand = _mulberry32(_fnv1a_32(location.strip().lower()))
    lat_offset = (rand() - 0.5) * 0.9
    lng_offset = (rand() - 0.5) * 0.9
    return PH_CENTER[0] + lat_offset, PH_CENTER[1] + lng_offset
