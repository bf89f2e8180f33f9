from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from src.app.ports.output import IReportRepository
from src.domain.models import StopReport


@dataclass(slots=True)
class InMemoryReportRepository(IReportRepository):
    """Report store used when no DynamoDB table is configured."""

    reports: tuple[StopReport, ...] = ()

    def reports_for_stops(self, stop_ids: Sequence[str]) -> tuple[StopReport, ...]:
        wanted = set(stop_ids)
        return tuple(r for r in self.reports if wanted.intersection(r.stop_ids))
