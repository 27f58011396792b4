"""Severity scoring — time-decayed, severity-weighted report scores.

A group of reports is scored as the sum of severity weight times recency
weight, then classified into a discrete level. Classification has two tiers:
a single sufficiently recent and severe report overrides the score, otherwise
the score is compared against fixed thresholds.

The point-severity resolver lives here too: a new report's severity is the
classification of the reports already near it.
"""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Sequence

from areawatch.core.geo import haversine_m, valid_point
from areawatch.core.models import SEVERITY_LEVELS, Report, Severity

SEVERITY_WEIGHTS: dict[Severity, float] = {
    Severity.LOW: 1.0,
    Severity.MEDIUM: 2.0,
    Severity.HIGH: 3.0,
    Severity.CRITICAL: 4.0,
}

# Minimum score for each level when no recency override applies.
SEVERITY_THRESHOLDS: dict[Severity, float] = {
    Severity.CRITICAL: 12.0,
    Severity.HIGH: 6.0,
    Severity.MEDIUM: 3.0,
}

# A report younger than this many hours forces its own level.
RECENCY_OVERRIDE_HOURS: dict[Severity, float] = {
    Severity.CRITICAL: 6.0,
    Severity.HIGH: 12.0,
    Severity.MEDIUM: 24.0,
}

# Decay constant of the recency weight, in hours.
DECAY_HOURS = 24.0

# Neighborhood radius used to derive a point's severity.
NEIGHBORHOOD_RADIUS_M = 2500.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(dt: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def age_hours(timestamp: datetime, now: datetime) -> float:
    return (as_utc(now) - as_utc(timestamp)).total_seconds() / 3600


def recency_weight(timestamp: datetime, now: datetime | None = None) -> float:
    """weight = e^(-age_hours / 24)"""
    now = now or utcnow()
    return math.exp(-age_hours(timestamp, now) / DECAY_HOURS)


def severity_weight(severity: Severity) -> float:
    return SEVERITY_WEIGHTS[severity]


def severity_score(reports: Iterable[Report], now: datetime | None = None) -> float:
    """Sum of severity weight x recency weight over the group."""
    now = now or utcnow()
    return sum(
        severity_weight(r.severity) * recency_weight(r.timestamp, now)
        for r in reports
    )


def assign_severity_level(
    score: float,
    reports: Sequence[Report],
    now: datetime | None = None,
) -> Severity:
    """Classify a group from its score, unless a recent report overrides it.

    The override scan walks ``reports`` in the given order and returns on the
    first qualifying report. It is not a search for the most severe one: an
    early recent ``high`` report wins over a later recent ``critical``.
    """
    now = now or utcnow()

    for report in reports:
        limit = RECENCY_OVERRIDE_HOURS.get(report.severity)
        if limit is not None and age_hours(report.timestamp, now) < limit:
            return report.severity

    for level in (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM):
        if score >= SEVERITY_THRESHOLDS[level]:
            return level
    return Severity.LOW


def count_reports_by_severity(reports: Iterable[Report]) -> dict[str, int]:
    counts = {level.value: 0 for level in reversed(SEVERITY_LEVELS)}
    for report in reports:
        counts[report.severity.value] += 1
    return counts


def count_needs_rescue(reports: Iterable[Report]) -> int:
    return sum(1 for r in reports if r.needs_rescue)


def latest_timestamp(reports: Sequence[Report], now: datetime | None = None) -> datetime:
    """Latest observation time in the group; ``now`` for an empty group."""
    if not reports:
        return as_utc(now or utcnow())
    return max(as_utc(r.timestamp) for r in reports)


def calculate_severity_for_location(
    reports: Iterable[Report],
    coordinates,
    now: datetime | None = None,
    radius_m: float = NEIGHBORHOOD_RADIUS_M,
) -> Severity:
    """Severity of a point, derived from the reports within ``radius_m`` of it.

    Returns ``low`` when the point is absent or has no neighbors.
    """
    point = valid_point(coordinates)
    if point is None:
        return Severity.LOW

    now = now or utcnow()
    nearby = []
    for report in reports:
        other = valid_point(report.coordinates)
        if other is not None and haversine_m(point, other) <= radius_m:
            nearby.append(report)

    if not nearby:
        return Severity.LOW
    return assign_severity_level(severity_score(nearby, now), nearby, now)


def reassess_severities(
    reports: Sequence[Report],
    now: datetime | None = None,
    radius_m: float = NEIGHBORHOOD_RADIUS_M,
) -> list[Report]:
    """Recompute every report's severity from its neighborhood.

    All reports resolve against the same original snapshot, so the result
    does not depend on the order in which they are reassessed.
    """
    now = now or utcnow()
    return [
        replace(r, severity=calculate_severity_for_location(reports, r.coordinates, now, radius_m))
        for r in reports
    ]
