"""In-memory ranking cache with time-based eviction.

Injected into the area endpoints instead of living as module state.
Entries expire after ``ttl_seconds``; a new report invalidates everything.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from areawatch.core.models import AreaSeverityRanking


@dataclass
class CachedRanking:
    rankings: list[AreaSeverityRanking]
    calculated_at: float  # time.time()
    expires_at: float     # clock() value


class RankingCache:
    """Thread-safe TTL cache of ranking results keyed by time window."""

    def __init__(self, ttl_seconds: float = 300.0, max_entries: int = 64,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self._lock = threading.Lock()
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[int, CachedRanking] = {}
        self.hits = 0
        self.misses = 0

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def get(self, time_window_hours: int) -> CachedRanking | None:
        if not self.enabled:
            return None
        now = self._clock()
        with self._lock:
            entry = self._entries.get(time_window_hours)
            if entry is None or entry.expires_at <= now:
                self._entries.pop(time_window_hours, None)
                self.misses += 1
                return None
            self.hits += 1
            return entry

    def put(self, time_window_hours: int, rankings: list[AreaSeverityRanking]) -> CachedRanking:
        entry = CachedRanking(
            rankings=rankings,
            calculated_at=time.time(),
            expires_at=self._clock() + self._ttl,
        )
        if not self.enabled:
            return entry
        with self._lock:
            self._prune_expired()
            if len(self._entries) >= self._max_entries:
                # Evict the entry closest to expiry.
                oldest = min(self._entries, key=lambda k: self._entries[k].expires_at)
                del self._entries[oldest]
            self._entries[time_window_hours] = entry
        return entry

    def invalidate(self) -> None:
        with self._lock:
            self._entries.clear()

    def _prune_expired(self) -> None:
        """Drop expired entries. Caller holds lock."""
        now = self._clock()
        stale = [k for k, e in self._entries.items() if e.expires_at <= now]
        for k in stale:
            del self._entries[k]

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "enabled": self.enabled,
                "entries": len(self._entries),
                "hits": self.hits,
                "misses": self.misses,
                "ttl_seconds": self._ttl,
            }
