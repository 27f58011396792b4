"""Storage interface (port) for persisting and fetching reports."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from areawatch.core.models import Report


class ReportStorage(Protocol):
    """Port: persists reports and serves recent snapshots of them."""

    async def store(self, report: Report) -> None: ...

    async def store_batch(self, reports: list[Report]) -> None: ...

    def read_all(self) -> list[Report]: ...

    def fetch_since(self, cutoff: datetime) -> list[Report]: ...

    def delete_reports(self, report_ids: Iterable[str]) -> int: ...
