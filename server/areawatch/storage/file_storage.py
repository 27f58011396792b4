"""File-based storage implementation.

Stores reports as JSON Lines in .jsonl files, one object per report.
Coordinates are written as EWKT (``SRID=4326;POINT(lng lat)``), the same
text form the PostGIS-backed feeds export.

Directory structure: base_dir/YYYY/MM/DD/HH/reports.jsonl, partitioned by
the report's observation timestamp. Soft deletes append tombstones to
base_dir/deleted.jsonl.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

import structlog

from areawatch.core.coordinates import format_ewkt, parse_coordinates
from areawatch.core.models import AlertType, Report, ReportSource, Severity

log = structlog.get_logger()

_REPORTS_FILE = "reports.jsonl"
_TOMBSTONE_FILE = "deleted.jsonl"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp; naive values are taken as UTC."""
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def report_to_record(report: Report) -> dict:
    return {
        "id": report.id,
        "reporter_name": report.reporter_name,
        "location": report.location,
        "barangay": report.barangay,
        "city": report.city,
        "province": report.province,
        "region": report.region,
        "type": report.type.value,
        "severity": report.severity.value,
        "description": report.description,
        "coordinates": format_ewkt(report.coordinates) if report.coordinates else None,
        "needs_rescue": report.needs_rescue,
        "source": report.source.value,
        "external_id": report.external_id,
        "source_url": report.source_url,
        "timestamp": report.timestamp.isoformat(),
    }


def report_from_record(record: dict) -> Report:
    """Build a Report from a stored record.

    Raises KeyError/ValueError for records missing required fields; an
    undecodable location only drops the coordinates.
    """
    coords = parse_coordinates(record.get("coordinates"))
    if coords is None and record.get("coordinates") is not None:
        log.debug("coordinates_undecodable", report_id=record.get("id"))

    return Report(
        id=str(record["id"]),
        severity=Severity(record["severity"]),
        timestamp=parse_timestamp(record["timestamp"]),
        coordinates=coords,
        needs_rescue=bool(record.get("needs_rescue", False)),
        source=ReportSource(record.get("source", ReportSource.COMMUNITY.value)),
        reporter_name=record.get("reporter_name", ""),
        location=record.get("location", ""),
        type=AlertType(record.get("type", AlertType.OTHER.value)),
        description=record.get("description", ""),
        barangay=record.get("barangay"),
        city=record.get("city"),
        province=record.get("province"),
        region=record.get("region"),
        source_url=record.get("source_url"),
        external_id=record.get("external_id"),
    )


class FileReportStorage:
    """ReportStorage backed by date/hour partitioned files on disk."""

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def _hour_dir(self, timestamp: datetime) -> Path:
        """Return the directory for a given timestamp."""
        dt = timestamp.astimezone(timezone.utc)
        path = self._base_dir / f"{dt.year:04d}" / f"{dt.month:02d}" / f"{dt.day:02d}" / f"{dt.hour:02d}"
        path.mkdir(parents=True, exist_ok=True)
        return path

    async def store(self, report: Report) -> None:
        """Append a single report to its hour file."""
        hour_dir = self._hour_dir(report.timestamp)
        line = json.dumps(report_to_record(report), separators=(",", ":"))
        with open(hour_dir / _REPORTS_FILE, "a") as f:
            f.write(line + "\n")

        log.debug("report_written", report_id=report.id, path=str(hour_dir))

    async def store_batch(self, reports: list[Report]) -> None:
        """Store a batch of reports."""
        for report in reports:
            await self.store(report)

    def _deleted_ids(self) -> set[str]:
        path = self._base_dir / _TOMBSTONE_FILE
        if not path.exists():
            return set()
        deleted = set()
        with open(path) as f:
            for lineno, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    deleted.add(json.loads(line)["id"])
                except (json.JSONDecodeError, KeyError, TypeError):
                    log.warning("tombstone_corrupt", path=str(path), line=lineno)
        return deleted

    def _iter_records(self) -> Iterable[tuple[Path, dict]]:
        for path in sorted(self._base_dir.glob(f"*/*/*/*/{_REPORTS_FILE}")):
            with open(path) as f:
                for lineno, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        yield path, json.loads(line)
                    except json.JSONDecodeError:
                        log.warning("record_corrupt", path=str(path), line=lineno)

    def read_all(self) -> list[Report]:
        """All non-deleted reports, in storage order."""
        deleted = self._deleted_ids()
        reports = []
        for path, record in self._iter_records():
            if str(record.get("id")) in deleted:
                continue
            try:
                reports.append(report_from_record(record))
            except (KeyError, ValueError):
                log.warning("record_invalid", path=str(path), report_id=record.get("id"))
        return reports

    def fetch_since(self, cutoff: datetime) -> list[Report]:
        """Non-deleted reports observed at or after ``cutoff``, newest first."""
        reports = [r for r in self.read_all() if r.timestamp >= cutoff]
        reports.sort(key=lambda r: r.timestamp, reverse=True)
        return reports

    def delete_reports(self, report_ids: Iterable[str]) -> int:
        """Soft-delete reports by id. Returns how many were newly deleted."""
        live = {r.id for r in self.read_all()}
        targets = [rid for rid in dict.fromkeys(str(i) for i in report_ids) if rid in live]
        if not targets:
            return 0

        deleted_at = datetime.now(timezone.utc).isoformat()
        with open(self._base_dir / _TOMBSTONE_FILE, "a") as f:
            for rid in targets:
                f.write(json.dumps({"id": rid, "deleted_at": deleted_at}) + "\n")

        log.info("reports_deleted", count=len(targets))
        return len(targets)
