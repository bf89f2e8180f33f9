from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.exceptions import NotFound
from src.domain.models import (
    CachedMovement,
    CandidateRoute,
    Leg,
    RawMovement,
    TransitSystem,
)


class ITransitSystemAdapter(ABC):
    """Port over one live-transit data source.

    Implementations raise `SourceUnavailable` for any upstream failure.
    """

    system: TransitSystem
    cache_ttl_s: float
    supports_trip_lookup: bool = False

    @abstractmethod
    async def list_movements(
        self, *, leg: Leg, route: CandidateRoute | None
    ) -> tuple[RawMovement, ...]:
        """Raw movements seen at the leg's origin for one route (or all)."""

        raise NotImplementedError

    async def fetch_movement(
        self, *, trip_ref: str, leg: Leg, cached: CachedMovement | None
    ) -> RawMovement:
        """Look a movement up by its source id; only for sources that can."""

        raise NotFound(f"{self.system.value} cannot look up trip {trip_ref}")
