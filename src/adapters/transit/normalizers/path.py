from __future__ import annotations

from src.adapters.transit.normalizers.base import TripNormalizer, build_candidate
from src.domain.algorithms.timestamps import parse_iso_epoch
from src.domain.exceptions import UnsupportedSystem
from src.domain.models import (
    CandidateRoute,
    CandidateTrip,
    Leg,
    LegTiming,
    RawMovement,
    TransitSystem,
)


def confirms_direction(train: dict, route: CandidateRoute | None) -> str | None:
    """Valid direction name matching the train's direction code or headsign."""

    if route is None:
        return None
    code = str(train.get("direction") or "").strip().upper()
    headsign = str(train.get("headsign") or "").strip().upper()
    for direction in route.valid_directions:
        if code and direction.direction_id.strip().upper() == code:
            return direction.direction_name
        if headsign and direction.direction_name.strip().upper() == headsign:
            return direction.direction_name
    return None


class PathNormalizer(TripNormalizer):
    """Lists PATH trains against pre-validated directions.

    Trains carry no id and no downstream stops, so a chosen train cannot be
    followed to the destination and resolution is unsupported.
    """

    system = TransitSystem.PATH
    supports_resolution = False

    def to_candidate(
        self,
        movement: RawMovement,
        *,
        leg: Leg,
        route: CandidateRoute | None,
        now_epoch: int,
    ) -> CandidateTrip | None:
        train = movement.payload
        direction = confirms_direction(train, route)
        if direction is None or route is None:
            return None

        departure = parse_iso_epoch(train.get("projectedArrival"))
        if departure is None:
            return None
        key = self.trip_key(
            route_id=route.route_id, raw_id=None, departure_epoch=departure
        )
        return build_candidate(
            trip_key=key,
            route_id=route.route_id,
            route_name=route.route_name,
            direction=str(train.get("headsign") or direction),
            departure_epoch=departure,
            arrival_epoch=None,
        )

    def to_timing(
        self, movement: RawMovement, *, leg: Leg, route: CandidateRoute | None
    ) -> LegTiming:
        raise UnsupportedSystem(
            TransitSystem.PATH.value,
            "PATH trains cannot be followed between stations",
        )
