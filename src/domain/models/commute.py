from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .trip import ResolvedLegDetail


class LegStatus(str, Enum):
    RESOLVED = "resolved"
    UNAVAILABLE = "unavailable"
    UNSUPPORTED = "unsupported"
    DEPENDENCY_ERROR = "dependency_error"


class WalkTimeSource(str, Enum):
    CUSTOM = "custom"
    STORED = "stored"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class LegOutcome:
    leg_index: int
    transit_system: str
    origin_stop_id: str
    destination_stop_id: str
    status: LegStatus
    detail: ResolvedLegDetail | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == LegStatus.RESOLVED


@dataclass(frozen=True, slots=True)
class WalkTimeEntry:
    """Walk between two legs; `leg_index` is the leg that follows the walk."""

    leg_index: int
    minutes: int
    source: WalkTimeSource


@dataclass(frozen=True, slots=True)
class CommuteTotals:
    departure_epoch: int
    arrival_epoch: int
    total_duration_minutes: int
    total_transit_minutes: int
    total_walk_minutes: int


@dataclass(frozen=True, slots=True)
class CommuteResult:
    success: bool
    beginning_leg_index: int
    legs: tuple[LegOutcome, ...]
    walk_times: tuple[WalkTimeEntry, ...] = ()
    totals: CommuteTotals | None = None
    error: str | None = None
    error_leg_index: int | None = None


@dataclass(frozen=True, slots=True)
class WalkTimeEstimate:
    minutes: int
    estimated: bool
    distance_m: float | None = None
