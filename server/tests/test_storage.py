"""Tests for the file-based report storage."""

from __future__ import annotations

import json
from datetime import timedelta

import pytest

from areawatch.core.models import AlertType, ReportSource, Severity
from areawatch.storage.file_storage import FileReportStorage, parse_timestamp
from conftest import BASE_LAT, BASE_LNG, NOW, make_report


@pytest.fixture
def storage(tmp_path):
    return FileReportStorage(base_dir=tmp_path / "reports")


@pytest.mark.asyncio
async def test_store_and_read_back(storage, tmp_path):
    report = make_report(
        Severity.HIGH, hours_ago=2, needs_rescue=True,
        source=ReportSource.PAGASA, type=AlertType.STORM,
        reporter_name="PAGASA", location="Legazpi", barangay="Bitano",
    )
    await storage.store(report)

    (loaded,) = storage.read_all()
    assert loaded == report

    ts = report.timestamp
    hour_file = tmp_path / "reports" / f"{ts:%Y}" / f"{ts:%m}" / f"{ts:%d}" / f"{ts:%H}" / "reports.jsonl"
    record = json.loads(hour_file.read_text().strip())
    assert record["coordinates"] == f"SRID=4326;POINT({BASE_LNG!r} {BASE_LAT!r})"


@pytest.mark.asyncio
async def test_report_without_coordinates(storage):
    await storage.store(make_report(coordinates=None))
    (loaded,) = storage.read_all()
    assert loaded.coordinates is None


@pytest.mark.asyncio
async def test_fetch_since_filters_and_sorts_newest_first(storage):
    old = make_report(hours_ago=50)
    mid = make_report(hours_ago=10)
    new = make_report(hours_ago=1)
    await storage.store_batch([mid, old, new])

    fetched = storage.fetch_since(NOW - timedelta(hours=24))
    assert [r.id for r in fetched] == [new.id, mid.id]


@pytest.mark.asyncio
async def test_soft_delete(storage):
    a = make_report()
    b = make_report()
    await storage.store_batch([a, b])

    assert storage.delete_reports([a.id, a.id, "missing"]) == 1
    assert [r.id for r in storage.read_all()] == [b.id]
    # Deleting again is a no-op.
    assert storage.delete_reports([a.id]) == 0


@pytest.mark.asyncio
async def test_corrupt_and_invalid_lines_are_skipped(storage, tmp_path):
    report = make_report()
    await storage.store(report)

    ts = report.timestamp
    hour_file = tmp_path / "reports" / f"{ts:%Y}" / f"{ts:%m}" / f"{ts:%d}" / f"{ts:%H}" / "reports.jsonl"
    with open(hour_file, "a") as f:
        f.write("{not json\n")
        f.write(json.dumps({"id": "x", "severity": "apocalyptic", "timestamp": ts.isoformat()}) + "\n")
        f.write(json.dumps({
            "id": "y", "severity": "low", "timestamp": ts.isoformat(),
            "coordinates": "POINT(garbage)",
        }) + "\n")

    loaded = {r.id: r for r in storage.read_all()}
    assert set(loaded) == {report.id, "y"}
    assert loaded["y"].coordinates is None


def test_parse_timestamp_accepts_z_and_naive():
    assert parse_timestamp("2025-07-24T12:00:00Z") == NOW
    assert parse_timestamp("2025-07-24T12:00:00") == NOW


@pytest.mark.asyncio
async def test_corrupt_tombstone_lines_are_skipped(storage, tmp_path):
    a = make_report()
    b = make_report()
    await storage.store_batch([a, b])

    with open(tmp_path / "reports" / "deleted.jsonl", "a") as f:
        f.write(json.dumps({"id": a.id}) + "\n")
        f.write('{"id": "y"\n')
        f.write("not json\n")
        f.write(json.dumps({"deleted_at": "2025-07-24T12:00:00Z"}) + "\n")

    assert [r.id for r in storage.read_all()] == [b.id]
    assert [r.id for r in storage.fetch_since(NOW - timedelta(hours=1))] == [b.id]
