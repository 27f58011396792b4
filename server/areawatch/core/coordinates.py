"""Coordinate decoding for stored and imported report records.

Accepts the point encodings a PostGIS-backed feed may hand us:
- WKT / EWKT text: ``POINT(lng lat)`` or ``SRID=4326;POINT(lng lat)``
- hex-encoded WKB / EWKB points
- GeoJSON Point, as a dict or a JSON string
- a plain ``[lat, lng]`` pair

Everything decodes to a normalized ``(lat, lng)`` tuple or None. Malformed
input is never an error, only an absent location.
"""

from __future__ import annotations

import json
import math
import re
import struct

from areawatch.core.geo import normalize_lat_lng, valid_point

_POINT_RE = re.compile(r"POINT\s*\(\s*([-\d.eE+]+)\s+([-\d.eE+]+)\s*\)", re.IGNORECASE)
_HEX_RE = re.compile(r"^[0-9a-fA-F]+$")

_WKB_POINT = 1
_EWKB_SRID_FLAG = 0x20000000


def format_ewkt(coords: tuple[float, float]) -> str:
    """Encode (lat, lng) as EWKT; PostGIS order is lng first."""
    lat, lng = coords
    return f"SRID=4326;POINT({lng!r} {lat!r})"


def parse_point_text(text: str) -> tuple[float, float] | None:
    match = _POINT_RE.search(text)
    if not match:
        return None
    try:
        lng = float(match.group(1))
        lat = float(match.group(2))
    except ValueError:
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return lat, lng


def parse_wkb_point(hex_text: str) -> tuple[float, float] | None:
    clean = hex_text.strip()
    if not _HEX_RE.match(clean) or len(clean) < 18 or len(clean) % 2 != 0:
        return None

    data = bytes.fromhex(clean)
    endian = "<" if data[0] == 1 else ">"
    (geom_type,) = struct.unpack_from(f"{endian}I", data, 1)
    offset = 5

    if geom_type & 0xFF != _WKB_POINT:
        return None
    if geom_type & _EWKB_SRID_FLAG:
        offset += 4
    if offset + 16 > len(data):
        return None

    x, y = struct.unpack_from(f"{endian}dd", data, offset)
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return y, x


def _from_geojson(obj: dict) -> tuple[float, float] | None:
    coords = obj.get("coordinates")
    if not isinstance(coords, (list, tuple)) or len(coords) < 2:
        return None
    return valid_point((coords[1], coords[0]))


def parse_coordinates(value) -> tuple[float, float] | None:
    """Decode any supported point encoding to a normalized (lat, lng) pair."""
    if value is None:
        return None

    point: tuple[float, float] | None = None
    if isinstance(value, str):
        text = value.strip()
        if text.upper().startswith(("POINT", "SRID=")):
            point = parse_point_text(text)
        elif text.startswith("{"):
            try:
                obj = json.loads(text)
            except json.JSONDecodeError:
                return None
            if isinstance(obj, dict) and obj.get("type") == "Point":
                point = _from_geojson(obj)
        else:
            point = parse_wkb_point(text)
    elif isinstance(value, dict):
        point = _from_geojson(value)
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        point = valid_point(value)

    if point is None:
        return None
    return normalize_lat_lng(point)
