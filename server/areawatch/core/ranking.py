"""Area ranking: turns a report snapshot into ranked hotspot summaries.

Filters the snapshot to the time window, clusters it, scores each cluster,
and sorts by score descending. Pure and synchronous: every call computes
from scratch and returns new objects.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from areawatch.core.clustering import CLUSTER_RADIUS_M, group_reports_by_area
from areawatch.core.geo import bounding_box, centroid
from areawatch.core.models import AreaSeverityRanking, Report
from areawatch.core.scoring import (
    as_utc,
    assign_severity_level,
    count_needs_rescue,
    count_reports_by_severity,
    latest_timestamp,
    severity_score,
    utcnow,
)

DEFAULT_TIME_WINDOW_HOURS = 168  # 7 days
MIN_TIME_WINDOW_HOURS = 1
MAX_TIME_WINDOW_HOURS = 720  # 30 days

DEFAULT_LIMIT = 50
MIN_LIMIT = 1
MAX_LIMIT = 100


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def clamp_time_window(hours: int, maximum: int = MAX_TIME_WINDOW_HOURS) -> int:
    return _clamp(hours, MIN_TIME_WINDOW_HOURS, maximum)


def clamp_limit(limit: int, maximum: int = MAX_LIMIT) -> int:
    return _clamp(limit, MIN_LIMIT, maximum)


def calculate_area_severity(
    reports: Iterable[Report],
    time_window_hours: float = DEFAULT_TIME_WINDOW_HOURS,
    now: datetime | None = None,
    limit: int | None = None,
    radius_m: float = CLUSTER_RADIUS_M,
) -> list[AreaSeverityRanking]:
    """Rank hotspot areas by severity score, highest first.

    Ties keep cluster discovery order. ``limit`` truncates the sorted list.
    """
    now = as_utc(now or utcnow())
    cutoff = now - timedelta(hours=time_window_hours)
    recent = [r for r in reports if as_utc(r.timestamp) >= cutoff]

    rankings = []
    for cluster in group_reports_by_area(recent, radius_m):
        members = cluster.reports
        score = severity_score(members, now)
        box = bounding_box(r.coordinates for r in members)
        rankings.append(AreaSeverityRanking(
            area_identifier=cluster.identifier,
            severity=assign_severity_level(score, members, now),
            score=round(score, 2),
            report_counts=count_reports_by_severity(members),
            needs_rescue_count=count_needs_rescue(members),
            latest_report_at=latest_timestamp(members, now),
            coordinates=centroid(r.coordinates for r in members),
            bounds=box.to_polygon() if box else None,
            report_ids=[r.id for r in members],
        ))

    rankings.sort(key=lambda r: r.score, reverse=True)
    if limit is not None:
        rankings = rankings[:limit]
    return rankings


def rankings_to_geojson(rankings: Iterable[AreaSeverityRanking]) -> dict:
    """Convert rankings to a GeoJSON FeatureCollection."""
    return {
        "type": "FeatureCollection",
        "features": [r.to_geojson_feature() for r in rankings],
    }
