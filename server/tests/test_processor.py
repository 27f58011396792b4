"""Tests for the report processor (submission path and area ranking)."""

from __future__ import annotations

import pytest

from areawatch.config import SeverityConfig
from areawatch.core.cache import RankingCache
from areawatch.core.models import ReportSubmission, Severity
from areawatch.core.processor import ReportProcessor
from areawatch.core.scoring import utcnow
from areawatch.core.stats import ServerStats
from areawatch.storage.file_storage import FileReportStorage
from conftest import BASE_LAT, BASE_LNG, make_report, north_of


def _submission(**overrides) -> ReportSubmission:
    fields = {
        "reporter_name": "Juan",
        "location": "Marikina, Metro Manila",
        "description": "Flooding",
        "coordinates": (BASE_LAT, BASE_LNG),
    }
    fields.update(overrides)
    return ReportSubmission(**fields)


class FailingStorage(FileReportStorage):
    async def store(self, report) -> None:
        raise OSError("disk full")


@pytest.fixture
def parts(tmp_path):
    storage = FileReportStorage(base_dir=tmp_path / "reports")
    stats = ServerStats()
    cache = RankingCache(ttl_seconds=300)
    processor = ReportProcessor(storage=storage, stats=stats, cache=cache, settings=SeverityConfig())
    return processor, storage, stats


@pytest.mark.asyncio
async def test_first_report_in_area_is_low(parts):
    processor, storage, stats = parts
    report = await processor.submit(_submission(needs_rescue=True))

    assert report.severity is Severity.LOW
    assert report.needs_rescue is True
    assert [r.id for r in storage.read_all()] == [report.id]
    snap = stats.snapshot()
    assert snap["reports_received"] == 1
    assert snap["resolved_severity"]["low"] == 1


@pytest.mark.asyncio
async def test_severity_comes_from_neighbors(parts):
    processor, storage, _ = parts
    await storage.store(make_report(Severity.CRITICAL, hours_ago=1, coordinates=north_of(1500), now=utcnow()))

    near = await processor.submit(_submission())
    far = await processor.submit(_submission(coordinates=north_of(10_000)))

    assert near.severity is Severity.CRITICAL
    assert far.severity is Severity.LOW


@pytest.mark.asyncio
async def test_old_neighbors_outside_window_are_ignored(parts):
    processor, storage, _ = parts
    await storage.store(make_report(Severity.CRITICAL, hours_ago=200, now=utcnow()))

    report = await processor.submit(_submission())
    assert report.severity is Severity.LOW


@pytest.mark.asyncio
async def test_missing_coordinates_get_approximate_location(parts):
    processor, _, _ = parts
    report = await processor.submit(_submission(coordinates=None, location="Cebu City, Cebu"))
    assert report.coordinates == (10.3157, 123.8854)


@pytest.mark.asyncio
async def test_storage_failure_propagates(tmp_path):
    stats = ServerStats()
    processor = ReportProcessor(
        storage=FailingStorage(base_dir=tmp_path / "reports"),
        stats=stats,
        cache=RankingCache(),
        settings=SeverityConfig(),
    )
    with pytest.raises(OSError):
        await processor.submit(_submission())

    snap = stats.snapshot()
    assert snap["storage_errors"] == 1
    assert snap["reports_stored"] == 0


@pytest.mark.asyncio
async def test_rank_areas_is_cached_until_next_submission(parts):
    processor, storage, stats = parts
    await storage.store(make_report(Severity.HIGH, hours_ago=1, now=utcnow()))

    first, cached = processor.rank_areas(168)
    assert cached is False
    assert len(first.rankings) == 1

    again, cached = processor.rank_areas(168)
    assert cached is True
    assert again is first

    await processor.submit(_submission(coordinates=north_of(10_000)))
    refreshed, cached = processor.rank_areas(168)
    assert cached is False
    assert len(refreshed.rankings) == 2
    assert stats.snapshot()["rankings"]["computed"] == 2


@pytest.mark.asyncio
async def test_rank_areas_reassesses_severity(parts):
    processor, storage, _ = parts
    now = utcnow()
    await storage.store(make_report(Severity.CRITICAL, hours_ago=1, now=now))
    await storage.store(make_report(Severity.LOW, hours_ago=1, coordinates=north_of(100), now=now))

    result, _ = processor.rank_areas(168)
    (area,) = result.rankings
    # Both reports resolve to critical, so both weigh 4.
    assert area.report_counts["critical"] == 2
    assert area.severity is Severity.CRITICAL


@pytest.mark.asyncio
async def test_rank_areas_without_reassessment(tmp_path):
    storage = FileReportStorage(base_dir=tmp_path / "reports")
    settings = SeverityConfig(reassess_on_rank=False, cache_ttl_seconds=0)
    processor = ReportProcessor(storage=storage, stats=ServerStats(), cache=RankingCache(0), settings=settings)
    now = utcnow()
    await storage.store(make_report(Severity.CRITICAL, hours_ago=1, now=now))
    await storage.store(make_report(Severity.LOW, hours_ago=1, coordinates=north_of(100), now=now))

    result, _ = processor.rank_areas(168)
    (area,) = result.rankings
    assert area.report_counts == {"critical": 1, "high": 0, "medium": 0, "low": 1}


@pytest.mark.asyncio
async def test_delete_invalidates_cache(parts):
    processor, storage, stats = parts
    report = make_report(Severity.HIGH, hours_ago=1, now=utcnow())
    await storage.store(report)
    processor.rank_areas(168)

    assert processor.delete(["nope"]) == 0
    assert processor.rank_areas(168)[1] is True

    assert processor.delete([report.id]) == 1
    result, cached = processor.rank_areas(168)
    assert cached is False
    assert result.rankings == []
    assert stats.snapshot()["reports_deleted"] == 1
