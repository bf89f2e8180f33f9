from __future__ import annotations

from typing import Any

from src.adapters.transit.gtfs_realtime import stop_event_epoch
from src.adapters.transit.mta_subway_adapter import subway_stop_code
from src.adapters.transit.normalizers.base import (
    TripNormalizer,
    build_candidate,
    stop_order,
)
from src.domain.exceptions import NotFound
from src.domain.models import (
    CandidateRoute,
    CandidateTrip,
    Leg,
    LegTiming,
    RawMovement,
    TransitSystem,
)

DIRECTION_LABELS = {"N": "Northbound", "S": "Southbound"}


def direction_from_stop(stop_code: str) -> str:
    suffix = stop_code[-1:].upper()
    return DIRECTION_LABELS.get(suffix, suffix)


def _served(trip_update: Any, leg: Leg) -> tuple[Any, Any] | None:
    updates = list(trip_update.stop_time_update)
    order = stop_order(
        [u.stop_id for u in updates],
        subway_stop_code(leg.origin_stop_id),
        subway_stop_code(leg.destination_stop_id),
    )
    if order is None:
        return None
    return updates[order[0]], updates[order[1]]


class MtaSubwayNormalizer(TripNormalizer):
    system = TransitSystem.MTA_SUBWAY

    def to_candidate(
        self,
        movement: RawMovement,
        *,
        leg: Leg,
        route: CandidateRoute | None,
        now_epoch: int,
    ) -> CandidateTrip | None:
        trip_update = movement.payload
        served = _served(trip_update, leg)
        if served is None:
            return None
        origin, destination = served

        departure = stop_event_epoch(origin, "arrival", "departure")
        if departure is None:
            return None
        arrival = stop_event_epoch(destination, "arrival", "departure")

        trip = trip_update.trip
        route_id = (
            trip.route_id or movement.route_id or (route.route_id if route else "")
        )
        key = self.trip_key(
            route_id=route_id,
            raw_id=trip.trip_id or None,
            departure_epoch=departure,
            service_day=trip.start_date or None,
        )
        return build_candidate(
            trip_key=key,
            route_id=route_id,
            route_name=route.route_name if route else route_id,
            direction=direction_from_stop(origin.stop_id),
            departure_epoch=departure,
            arrival_epoch=arrival,
        )

    def to_timing(
        self, movement: RawMovement, *, leg: Leg, route: CandidateRoute | None
    ) -> LegTiming:
        served = _served(movement.payload, leg)
        if served is None:
            raise NotFound(
                f"Trip no longer serves {leg.origin_stop_name or leg.origin_stop_id} "
                f"before {leg.destination_stop_name or leg.destination_stop_id}"
            )
        origin, destination = served

        departure = stop_event_epoch(origin, "departure", "arrival")
        if departure is None:
            raise NotFound(f"No departure time at {leg.origin_stop_id}")
        return LegTiming(
            departure_epoch=departure,
            arrival_epoch=stop_event_epoch(destination, "arrival", "departure"),
            direction=direction_from_stop(origin.stop_id),
        )
