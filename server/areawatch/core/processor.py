"""Report processor — resolves severity, persists reports, ranks areas.

This is the core business logic. It depends on the ReportStorage protocol,
not a concrete implementation.
"""

from __future__ import annotations

import time
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING

import structlog

from areawatch.core.geo import approx_coordinates
from areawatch.core.models import Report, ReportSource
from areawatch.core.ranking import calculate_area_severity
from areawatch.core.scoring import (
    calculate_severity_for_location,
    reassess_severities,
    utcnow,
)

if TYPE_CHECKING:
    from areawatch.config import SeverityConfig
    from areawatch.core.cache import CachedRanking, RankingCache
    from areawatch.core.models import ReportSubmission
    from areawatch.core.stats import ServerStats
    from areawatch.storage.base import ReportStorage

log = structlog.get_logger()


class ReportProcessor:
    """Turns validated submissions into stored reports and serves rankings."""

    def __init__(
        self,
        storage: ReportStorage,
        stats: ServerStats,
        cache: RankingCache,
        settings: SeverityConfig,
    ) -> None:
        self._storage = storage
        self._stats = stats
        self._cache = cache
        self._settings = settings

    async def submit(self, submission: ReportSubmission) -> Report:
        """Store a community report with severity derived from its neighborhood.

        Storage failures are logged, counted, and re-raised to the caller.
        """
        self._stats.record_received(submission.reporter_name)

        coords = submission.coordinates
        if coords is None:
            coords = approx_coordinates(submission.location)
            log.info("coordinates_approximated", location=submission.location[:40],
                     lat=round(coords[0], 4), lng=round(coords[1], 4))

        now = utcnow()
        cutoff = now - timedelta(hours=self._settings.default_time_window_hours)
        neighbors = self._storage.fetch_since(cutoff)
        severity = calculate_severity_for_location(
            neighbors, coords, now, self._settings.neighborhood_radius_m,
        )

        report = Report(
            id=str(uuid.uuid4()),
            severity=severity,
            timestamp=now,
            coordinates=coords,
            needs_rescue=submission.needs_rescue,
            source=ReportSource.COMMUNITY,
            reporter_name=submission.reporter_name,
            location=submission.location,
            type=submission.type,
            description=submission.description,
            barangay=submission.barangay,
            city=submission.city,
            province=submission.province,
            region=submission.region,
        )

        try:
            await self._storage.store(report)
        except Exception:
            log.error("report_store_failed", report_id=report.id, exc_info=True)
            self._stats.record_storage_error()
            raise

        self._stats.record_stored(severity)
        self._cache.invalidate()
        log.info("report_submitted", report_id=report.id, severity=severity.value,
                 neighbors=len(neighbors), needs_rescue=report.needs_rescue)
        return report

    def delete(self, report_ids: list[str]) -> int:
        deleted = self._storage.delete_reports(report_ids)
        if deleted:
            self._stats.record_deleted(deleted)
            self._cache.invalidate()
        return deleted

    def rank_areas(self, time_window_hours: int) -> tuple[CachedRanking, bool]:
        """Ranked hotspots for the window. Returns (result, served_from_cache)."""
        cached = self._cache.get(time_window_hours)
        if cached is not None:
            log.debug("areas_cache_hit", window_hours=time_window_hours)
            return cached, True

        started = time.perf_counter()
        now = utcnow()
        reports = self._storage.fetch_since(now - timedelta(hours=time_window_hours))
        if self._settings.reassess_on_rank:
            reports = reassess_severities(reports, now, self._settings.neighborhood_radius_m)

        rankings = calculate_area_severity(
            reports, time_window_hours, now=now, radius_m=self._settings.cluster_radius_m,
        )
        duration_ms = (time.perf_counter() - started) * 1000
        self._stats.record_ranking(duration_ms, len(rankings))
        log.info("areas_ranked", window_hours=time_window_hours, reports=len(reports),
                 areas=len(rankings), duration_ms=round(duration_ms, 2))
        return self._cache.put(time_window_hours, rankings), False
