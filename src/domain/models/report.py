from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FeasibilityLevel(str, Enum):
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"


@dataclass(frozen=True, slots=True)
class StopReport:
    """A rider report as supplied by the external report store."""

    report_id: str
    stop_ids: tuple[str, ...]
    severity: int | None = None
    status: str = "active"
    net_votes: int = 0


@dataclass(frozen=True, slots=True)
class FeasibilityScore:
    score: int
    level: FeasibilityLevel
    message: str
    report_count: int = 0
