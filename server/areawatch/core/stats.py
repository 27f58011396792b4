"""Server statistics and active-reporter tracking.

Tracks in-memory counters and a sliding window of recently active reporters.
No framework dependencies.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from areawatch.core.models import SEVERITY_LEVELS, Severity


@dataclass
class ReporterActivity:
    """Tracks a single reporter's recent activity."""
    last_seen: float          # time.monotonic() timestamp
    reports_sent: int = 0


class ServerStats:
    """Thread-safe server statistics.

    A reporter is considered active if its last submission was within
    ``active_window_seconds`` (default 3600s).
    """

    def __init__(self, active_window_seconds: float = 3600.0) -> None:
        self._lock = threading.Lock()
        self._started_at = time.time()
        self._active_window = active_window_seconds

        # Counters
        self.reports_received: int = 0
        self.reports_stored: int = 0
        self.reports_rejected: int = 0
        self.reports_deleted: int = 0
        self.storage_errors: int = 0
        self.rankings_computed: int = 0
        self.last_ranking_ms: float = 0.0
        self.last_area_count: int = 0

        # Computed severity of stored reports, by level.
        self.resolved_severity: dict[str, int] = {level.value: 0 for level in SEVERITY_LEVELS}

        # Reporter tracking: reporter name → ReporterActivity
        self._reporters: dict[str, ReporterActivity] = {}

    def record_received(self, reporter: str) -> None:
        """Record that a submission arrived from a reporter."""
        now = time.monotonic()
        with self._lock:
            self.reports_received += 1
            if reporter in self._reporters:
                activity = self._reporters[reporter]
                activity.last_seen = now
                activity.reports_sent += 1
            else:
                self._reporters[reporter] = ReporterActivity(last_seen=now, reports_sent=1)

    def record_stored(self, severity: Severity) -> None:
        with self._lock:
            self.reports_stored += 1
            self.resolved_severity[severity.value] += 1

    def record_rejected(self, count: int = 1) -> None:
        with self._lock:
            self.reports_rejected += count

    def record_deleted(self, count: int) -> None:
        with self._lock:
            self.reports_deleted += count

    def record_storage_error(self) -> None:
        with self._lock:
            self.storage_errors += 1

    def record_ranking(self, duration_ms: float, area_count: int) -> None:
        with self._lock:
            self.rankings_computed += 1
            self.last_ranking_ms = duration_ms
            self.last_area_count = area_count

    def _prune_stale_reporters(self, now: float) -> None:
        """Remove reporters not seen within the active window. Caller holds lock."""
        cutoff = now - self._active_window
        stale = [name for name, a in self._reporters.items() if a.last_seen < cutoff]
        for name in stale:
            del self._reporters[name]

    def snapshot(self) -> dict:
        """Return a JSON-serializable snapshot of all stats."""
        now_mono = time.monotonic()
        with self._lock:
            self._prune_stale_reporters(now_mono)

            return {
                "uptime_seconds": round(time.time() - self._started_at, 1),
                "reports_received": self.reports_received,
                "reports_stored": self.reports_stored,
                "reports_rejected": self.reports_rejected,
                "reports_deleted": self.reports_deleted,
                "storage_errors": self.storage_errors,
                "resolved_severity": dict(self.resolved_severity),
                "rankings": {
                    "computed": self.rankings_computed,
                    "last_duration_ms": round(self.last_ranking_ms, 2),
                    "last_area_count": self.last_area_count,
                },
                "active_reporters": {
                    "total": len(self._reporters),
                    "window_seconds": self._active_window,
                },
            }
