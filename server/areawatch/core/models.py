"""AreaWatch — core internal data models.

These are plain dataclasses with no framework dependencies.
JSON payloads and storage records are converted to/from these at the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Severity(str, Enum):
    """Ordered incident intensity: low < medium < high < critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


# Ascending order; every comparison goes through this table.
SEVERITY_LEVELS: tuple[Severity, ...] = (
    Severity.LOW,
    Severity.MEDIUM,
    Severity.HIGH,
    Severity.CRITICAL,
)
_SEVERITY_RANK = {level: i for i, level in enumerate(SEVERITY_LEVELS)}


class AlertType(str, Enum):
    FLOOD = "flood"
    FIRE = "fire"
    STORM = "storm"
    WIND = "wind"
    OTHER = "other"


class ReportSource(str, Enum):
    COMMUNITY = "community"
    PAGASA = "pagasa"  # official weather feed


@dataclass(frozen=True)
class Report:
    id: str
    severity: Severity
    timestamp: datetime
    coordinates: tuple[float, float] | None = None  # (lat, lng)
    needs_rescue: bool = False
    source: ReportSource = ReportSource.COMMUNITY

    # Descriptive fields, carried through but never scored.
    reporter_name: str = ""
    location: str = ""
    type: AlertType = AlertType.OTHER
    description: str = ""
    barangay: str | None = None
    city: str | None = None
    province: str | None = None
    region: str | None = None
    source_url: str | None = None
    external_id: str | None = None
    deleted_at: datetime | None = None

    def to_dict(self) -> dict:
        """JSON-serializable view for API responses."""
        return {
            "id": self.id,
            "reporter_name": self.reporter_name,
            "location": self.location,
            "barangay": self.barangay,
            "city": self.city,
            "province": self.province,
            "region": self.region,
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "timestamp": self.timestamp.isoformat(),
            "needs_rescue": self.needs_rescue,
            "source": self.source.value,
            "coordinates": list(self.coordinates) if self.coordinates else None,
            "source_url": self.source_url,
            "external_id": self.external_id,
        }


@dataclass(frozen=True)
class ReportSubmission:
    """A validated, not yet persisted, community report."""
    reporter_name: str
    location: str
    description: str
    type: AlertType = AlertType.OTHER
    coordinates: tuple[float, float] | None = None
    barangay: str | None = None
    city: str | None = None
    province: str | None = None
    region: str | None = None
    needs_rescue: bool = False


@dataclass
class AreaSeverityRanking:
    area_identifier: str
    severity: Severity
    score: float
    report_counts: dict[str, int]
    needs_rescue_count: int
    latest_report_at: datetime
    coordinates: tuple[float, float]  # centroid (lat, lng)
    bounds: dict | None = None
    area_type: str = "cluster"
    report_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "area_identifier": self.area_identifier,
            "area_type": self.area_type,
            "severity": self.severity.value,
            "score": self.score,
            "needs_rescue_count": self.needs_rescue_count,
            "report_counts": dict(self.report_counts),
            "latest_report_at": self.latest_report_at.isoformat(),
            "bounds": self.bounds,
            "coordinates": [self.coordinates[0], self.coordinates[1]],
            "report_count": len(self.report_ids),
        }

    def to_geojson_feature(self) -> dict:
        lat, lng = self.coordinates
        return {
            "type": "Feature",
            "geometry": {
                "type": "Point",
                "coordinates": [round(lng, 6), round(lat, 6)],
            },
            "properties": {
                "area_identifier": self.area_identifier,
                "severity": self.severity.value,
                "score": self.score,
                "needs_rescue_count": self.needs_rescue_count,
                "report_counts": dict(self.report_counts),
                "latest_report_at": self.latest_report_at.isoformat(),
                "bounds": self.bounds,
            },
        }
