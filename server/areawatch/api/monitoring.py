"""Health check and monitoring endpoints."""

from __future__ import annotations

import shutil
from pathlib import Path

from fastapi import APIRouter

from areawatch.core.ranking import MIN_LIMIT, MIN_TIME_WINDOW_HOURS
from areawatch.core.scoring import (
    DECAY_HOURS,
    RECENCY_OVERRIDE_HOURS,
    SEVERITY_THRESHOLDS,
    SEVERITY_WEIGHTS,
)

router = APIRouter(prefix="/api/v1")


@router.get("/health")
async def health() -> dict:
    """Basic health check."""
    from areawatch.main import get_config, get_stats

    stats = get_stats()
    config = get_config()

    storage_path = Path(config.storage.base_dir)
    try:
        disk = shutil.disk_usage(storage_path if storage_path.exists() else ".")
        disk_free_gb = round(disk.free / (1024 ** 3), 1)
        storage_writable = True
    except OSError:
        disk_free_gb = -1
        storage_writable = False

    snapshot = stats.snapshot()
    return {
        "status": "ok",
        "version": "0.1.0",
        "uptime_seconds": snapshot["uptime_seconds"],
        "storage_writable": storage_writable,
        "disk_free_gb": disk_free_gb,
    }


@router.get("/stats")
async def stats() -> dict:
    """Detailed server statistics, including the ranking cache."""
    from areawatch.main import get_cache, get_stats

    snapshot = get_stats().snapshot()
    snapshot["ranking_cache"] = get_cache().snapshot()
    return snapshot


@router.get("/config")
async def get_client_config() -> dict:
    """Scoring parameters and query limits for the map client."""
    from areawatch.main import get_config

    settings = get_config().severity
    return {
        "severity_weights": {k.value: v for k, v in SEVERITY_WEIGHTS.items()},
        "severity_thresholds": {k.value: v for k, v in SEVERITY_THRESHOLDS.items()},
        "recency_override_hours": {k.value: v for k, v in RECENCY_OVERRIDE_HOURS.items()},
        "decay_hours": DECAY_HOURS,
        "cluster_radius_m": settings.cluster_radius_m,
        "neighborhood_radius_m": settings.neighborhood_radius_m,
        "time_window_hours": {
            "default": settings.default_time_window_hours,
            "min": MIN_TIME_WINDOW_HOURS,
            "max": settings.max_time_window_hours,
        },
        "limit": {
            "default": settings.default_limit,
            "min": MIN_LIMIT,
            "max": settings.max_limit,
        },
    }
