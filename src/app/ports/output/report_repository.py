from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from src.domain.models import StopReport


class IReportRepository(ABC):
    """Read-only port over the external rider report store."""

    @abstractmethod
    def reports_for_stops(self, stop_ids: Sequence[str]) -> tuple[StopReport, ...]:
        raise NotImplementedError
