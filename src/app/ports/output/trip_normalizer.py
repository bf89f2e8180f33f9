from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import (
    CandidateRoute,
    CandidateTrip,
    Leg,
    LegTiming,
    RawMovement,
    TransitSystem,
)


class ITripNormalizer(ABC):
    """Turns one system's raw movements into `CandidateTrip`/`LegTiming`."""

    system: TransitSystem
    supports_resolution: bool = True

    @abstractmethod
    def to_candidate(
        self,
        movement: RawMovement,
        *,
        leg: Leg,
        route: CandidateRoute | None,
        now_epoch: int,
    ) -> CandidateTrip | None:
        """Return a candidate, or None when the movement does not provably
        serve the leg's origin before its destination or has no usable time.
        """

        raise NotImplementedError

    @abstractmethod
    def to_timing(
        self, movement: RawMovement, *, leg: Leg, route: CandidateRoute | None
    ) -> LegTiming:
        """Origin departure / destination arrival; raises `NotFound`."""

        raise NotImplementedError

    def has_stop_detail(self, movement: RawMovement) -> bool:
        """Whether `to_timing` can work from this record without a lookup."""

        return movement.has_stop_detail
