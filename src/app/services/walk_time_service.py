from __future__ import annotations

from dataclasses import dataclass

from src.app.ports.output import IStopDirectory
from src.domain.algorithms.geo_utils import (
    DEFAULT_WALK_MINUTES,
    estimate_walk_minutes,
    haversine_distance_m,
)
from src.domain.exceptions import NotFound
from src.domain.models import WalkTimeEstimate


@dataclass(slots=True)
class WalkTimeService:
    """Suggests a transfer walk between two stops from their coordinates."""

    stop_directory: IStopDirectory

    def estimate(self, from_stop_id: str, to_stop_id: str) -> WalkTimeEstimate:
        origin = self.stop_directory.get_stop(from_stop_id)
        if origin is None:
            raise NotFound(f"Unknown stop: {from_stop_id}")
        destination = self.stop_directory.get_stop(to_stop_id)
        if destination is None:
            raise NotFound(f"Unknown stop: {to_stop_id}")

        start, end = origin.location, destination.location
        if start is None or end is None:
            return WalkTimeEstimate(minutes=DEFAULT_WALK_MINUTES, estimated=True)

        return WalkTimeEstimate(
            minutes=estimate_walk_minutes(start, end),
            estimated=False,
            distance_m=haversine_distance_m(start, end),
        )
