"""Shared test fixtures."""

from __future__ import annotations

import itertools
import math
from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient

import areawatch.main as main_module
from areawatch.config import AppConfig
from areawatch.core.geo import EARTH_RADIUS_M
from areawatch.core.models import Report, ReportSource, Severity

# Reference point in Marikina, Metro Manila.
BASE_LAT = 14.6507
BASE_LNG = 121.1029

# Meters per degree of latitude on the sphere used by haversine_m.
METERS_PER_DEG = EARTH_RADIUS_M * math.pi / 180

NOW = datetime(2025, 7, 24, 12, 0, tzinfo=timezone.utc)


def north_of(meters: float, lat: float = BASE_LAT, lng: float = BASE_LNG) -> tuple[float, float]:
    """Point ``meters`` due north; haversine distance along a meridian is exact."""
    return lat + meters / METERS_PER_DEG, lng


_ids = itertools.count(1)


def make_report(
    severity: Severity | str = Severity.LOW,
    hours_ago: float = 0.0,
    coordinates: tuple[float, float] | None = (BASE_LAT, BASE_LNG),
    now: datetime = NOW,
    needs_rescue: bool = False,
    **kwargs,
) -> Report:
    return Report(
        id=kwargs.pop("id", f"r-{next(_ids)}"),
        severity=Severity(severity),
        timestamp=now - timedelta(hours=hours_ago),
        coordinates=coordinates,
        needs_rescue=needs_rescue,
        source=kwargs.pop("source", ReportSource.COMMUNITY),
        **kwargs,
    )


@pytest.fixture(autouse=True)
def _init_server(tmp_path):
    """Initialize server singletons for every test, using a temp directory."""
    config = AppConfig()
    config.storage.base_dir = str(tmp_path / "data")
    config.logging.level = "warning"

    main_module.init_components(config)

    yield

    # Cleanup
    main_module._config = None
    main_module._stats = None
    main_module._storage = None
    main_module._cache = None
    main_module._processor = None


@pytest.fixture
async def client():
    from areawatch.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
