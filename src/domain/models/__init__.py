from .alert import ServiceAlert
from .commute import (
    CommuteResult,
    CommuteTotals,
    LegOutcome,
    LegStatus,
    WalkTimeEntry,
    WalkTimeEstimate,
    WalkTimeSource,
)
from .geo import GeoPoint
from .movement import CachedMovement, RawMovement
from .report import FeasibilityLevel, FeasibilityScore, StopReport
from .stop import Stop
from .transit import CandidateRoute, Leg, TransitSystem, ValidDirection
from .trip import CandidateTrip, LegTiming, ResolvedLegDetail

__all__ = [
    "CachedMovement",
    "CandidateRoute",
    "CandidateTrip",
    "CommuteResult",
    "CommuteTotals",
    "FeasibilityLevel",
    "FeasibilityScore",
    "GeoPoint",
    "Leg",
    "LegOutcome",
    "LegStatus",
    "LegTiming",
    "RawMovement",
    "ResolvedLegDetail",
    "ServiceAlert",
    "Stop",
    "StopReport",
    "TransitSystem",
    "ValidDirection",
    "WalkTimeEntry",
    "WalkTimeEstimate",
    "WalkTimeSource",
]
