"""Area clustering — groups nearby reports into hotspot areas.

Uses a greedy single-pass approach: each report, in arrival order, joins the
first existing cluster (in creation order) whose centroid lies within
CLUSTER_RADIUS_M. If none does, it starts a new cluster.

First match, not nearest match. The same reports in a different order can
cluster differently, and a cluster can chain past the radius as its centroid
drifts toward new members.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from areawatch.core.geo import haversine_m, valid_point
from areawatch.core.models import Report

# Maximum distance (meters) between a report and a cluster centroid.
CLUSTER_RADIUS_M = 2500.0


def area_label(lat: float, lng: float) -> str:
    return f"Near {lat:.4f}, {lng:.4f}"


@dataclass
class AreaCluster:
    lat: float = 0.0
    lng: float = 0.0
    identifier: str = ""
    reports: list[Report] = field(default_factory=list)

    # Running sums for centroid update.
    _lat_sum: float = 0.0
    _lng_sum: float = 0.0

    @property
    def centroid(self) -> tuple[float, float]:
        return self.lat, self.lng

    def add_report(self, report: Report, lat: float, lng: float) -> None:
        self.reports.append(report)
        self._lat_sum += lat
        self._lng_sum += lng
        self.lat = self._lat_sum / len(self.reports)
        self.lng = self._lng_sum / len(self.reports)
        self.identifier = area_label(self.lat, self.lng)


def group_reports_by_area(
    reports: Iterable[Report],
    radius_m: float = CLUSTER_RADIUS_M,
) -> list[AreaCluster]:
    """Cluster reports into disjoint AreaCluster objects.

    Reports without usable coordinates are skipped. Every call builds fresh
    clusters; nothing is shared between calls.
    """
    clusters: list[AreaCluster] = []

    for report in reports:
        point = valid_point(report.coordinates)
        if point is None:
            continue

        matched = None
        for c in clusters:
            if haversine_m(point, c.centroid) <= radius_m:
                matched = c
                break

        if matched is None:
            matched = AreaCluster()
            clusters.append(matched)
        matched.add_report(report, *point)

    return clusters
