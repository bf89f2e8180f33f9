from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from src.app.ports.output import IReportRepository
from src.domain.algorithms.feasibility import score_feasibility
from src.domain.exceptions import InvalidInput
from src.domain.models import FeasibilityScore


@dataclass(slots=True)
class FeasibilityService:
    report_repository: IReportRepository

    def score(self, stop_ids: Sequence[str]) -> FeasibilityScore:
        wanted = [s.strip() for s in stop_ids if s and s.strip()]
        if not wanted:
            raise InvalidInput("At least one stop id is required")
        reports = self.report_repository.reports_for_stops(wanted)
        return score_feasibility(wanted, reports)
