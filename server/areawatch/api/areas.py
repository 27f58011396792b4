"""Area severity API endpoints.

Query parameters are clamped to their allowed ranges rather than rejected:
``timeWindowHours`` to [1, max_time_window_hours] and ``limit`` to
[1, max_limit].
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from areawatch.core.ranking import clamp_limit, clamp_time_window, rankings_to_geojson

router = APIRouter(prefix="/api/v1")


def _resolve_params(time_window_hours: int | None, limit: int | None) -> tuple[int, int]:
    from areawatch.main import get_config

    settings = get_config().severity
    window = clamp_time_window(
        settings.default_time_window_hours if time_window_hours is None else time_window_hours,
        settings.max_time_window_hours,
    )
    limit = clamp_limit(settings.default_limit if limit is None else limit, settings.max_limit)
    return window, limit


@router.get("/areas/severity")
async def get_area_severity(
    time_window_hours: int | None = Query(default=None, alias="timeWindowHours"),
    limit: int | None = Query(default=None),
) -> JSONResponse:
    """Ranked hotspot areas, highest score first."""
    from areawatch.main import get_processor

    window, limit = _resolve_params(time_window_hours, limit)
    result, cached = get_processor().rank_areas(window)
    calculated_at = datetime.fromtimestamp(result.calculated_at, tz=timezone.utc)

    return JSONResponse(content={
        "rankings": [r.to_dict() for r in result.rankings[:limit]],
        "calculated_at": calculated_at.isoformat(),
        "time_window_hours": window,
        "cached": cached,
    })


@router.get("/areas/geojson")
async def get_area_geojson(
    time_window_hours: int | None = Query(default=None, alias="timeWindowHours"),
    limit: int | None = Query(default=None),
) -> JSONResponse:
    """Ranked hotspot areas as a GeoJSON FeatureCollection for map overlays."""
    from areawatch.main import get_processor

    window, limit = _resolve_params(time_window_hours, limit)
    result, _ = get_processor().rank_areas(window)
    return JSONResponse(
        content=rankings_to_geojson(result.rankings[:limit]),
        media_type="application/geo+json",
    )
