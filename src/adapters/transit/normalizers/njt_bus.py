from __future__ import annotations

import re
from typing import Any

from src.adapters.transit.njt_bus_adapter import njt_bus_stop_code
from src.adapters.transit.normalizers.base import (
    TripNormalizer,
    build_candidate,
    stop_order,
)
from src.domain.algorithms.timestamps import (
    NJT_BUS_TIME_FORMAT,
    clock_time_epoch,
    parse_local_epoch,
)
from src.domain.exceptions import NotFound
from src.domain.models import (
    CandidateRoute,
    CandidateTrip,
    Leg,
    LegTiming,
    RawMovement,
    TransitSystem,
    ValidDirection,
)

_ROUTE_NUMBER = re.compile(r"^\d+\w?\s+")


def _headsign_key(text: str) -> str:
    return _ROUTE_NUMBER.sub("", text.strip()).strip().lower()


def matching_direction(
    header: str | None, route: CandidateRoute | None
) -> ValidDirection | None:
    """The stored valid direction whose name matches a trip header.

    Headers drop the route number ('NEW YORK'), stored directions keep it
    ('125 NEW YORK').
    """

    if not header or route is None:
        return None
    wanted = header.strip().lower()
    for direction in route.valid_directions:
        if _headsign_key(direction.direction_name) == wanted:
            return direction
    return None


def departure_epoch(trip: dict[str, Any], *, now_epoch: int) -> int | None:
    scheduled = parse_local_epoch(trip.get("sched_dep_time"), NJT_BUS_TIME_FORMAT)
    display = str(trip.get("departuretime") or "")
    if display.lower().startswith("in "):
        return clock_time_epoch(display, reference_epoch=now_epoch)
    realtime = clock_time_epoch(display, reference_epoch=scheduled or now_epoch)
    return realtime or scheduled


def _stop_epoch(stop: dict[str, Any]) -> int | None:
    return parse_local_epoch(
        stop.get("ApproxTime"), NJT_BUS_TIME_FORMAT
    ) or parse_local_epoch(stop.get("SchedDepTime"), NJT_BUS_TIME_FORMAT)


class NjtBusNormalizer(TripNormalizer):
    system = TransitSystem.NJT_BUS

    def to_candidate(
        self,
        movement: RawMovement,
        *,
        leg: Leg,
        route: CandidateRoute | None,
        now_epoch: int,
    ) -> CandidateTrip | None:
        trip = movement.payload
        direction = matching_direction(trip.get("header"), route)
        if direction is None or route is None:
            return None

        departure = departure_epoch(trip, now_epoch=now_epoch)
        if departure is None:
            return None
        scheduled = parse_local_epoch(trip.get("sched_dep_time"), NJT_BUS_TIME_FORMAT)

        key = self.trip_key(
            route_id=route.route_id,
            raw_id=trip.get("internal_trip_number"),
            departure_epoch=scheduled or departure,
        )
        return build_candidate(
            trip_key=key,
            route_id=route.route_id,
            route_name=route.route_name,
            direction=direction.direction_name,
            departure_epoch=departure,
            arrival_epoch=None,
        )

    def to_timing(
        self, movement: RawMovement, *, leg: Leg, route: CandidateRoute | None
    ) -> LegTiming:
        stops = [s for s in movement.payload.get("stops") or [] if isinstance(s, dict)]
        order = stop_order(
            [str(s.get("StopID") or "") for s in stops],
            njt_bus_stop_code(leg.origin_stop_id),
            njt_bus_stop_code(leg.destination_stop_id),
        )
        if order is None:
            raise NotFound(
                f"Trip does not stop at {leg.origin_stop_id} "
                f"before {leg.destination_stop_id}"
            )
        origin, destination = stops[order[0]], stops[order[1]]

        departure = _stop_epoch(origin)
        if departure is None:
            raise NotFound(f"No departure time at {leg.origin_stop_id}")

        trip = movement.payload.get("trip") or {}
        direction = matching_direction(trip.get("header"), route)
        return LegTiming(
            departure_epoch=departure,
            arrival_epoch=_stop_epoch(destination),
            direction=direction.direction_name if direction else None,
            origin_stop_name=origin.get("Description") or None,
            destination_stop_name=destination.get("Description") or None,
        )
