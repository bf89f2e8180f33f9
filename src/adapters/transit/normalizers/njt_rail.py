from __future__ import annotations

from typing import Any

from src.adapters.transit.njt_rail_adapter import njt_rail_station_code
from src.adapters.transit.normalizers.base import (
    TripNormalizer,
    build_candidate,
    stop_order,
)
from src.domain.algorithms.timestamps import (
    NJT_RAIL_TIME_FORMAT,
    parse_local_epoch,
    service_date,
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


def _epoch(stop: dict[str, Any], *keys: str) -> int | None:
    for key in keys:
        epoch = parse_local_epoch(stop.get(key), NJT_RAIL_TIME_FORMAT)
        if epoch is not None:
            return epoch
    return None


def _served(item: dict[str, Any], leg: Leg) -> tuple[dict, dict] | None:
    stops = [s for s in item.get("STOPS") or [] if isinstance(s, dict)]
    order = stop_order(
        [str(s.get("STATION_2CHAR") or "").strip().upper() for s in stops],
        njt_rail_station_code(leg.origin_stop_id),
        njt_rail_station_code(leg.destination_stop_id),
    )
    if order is None:
        return None
    return stops[order[0]], stops[order[1]]


def _service_day(item: dict[str, Any]) -> str | None:
    epoch = parse_local_epoch(item.get("SCHED_DEP_DATE"), NJT_RAIL_TIME_FORMAT)
    if epoch is None:
        return None
    return service_date(epoch)


class NjtRailNormalizer(TripNormalizer):
    system = TransitSystem.NJT_RAIL

    def to_candidate(
        self,
        movement: RawMovement,
        *,
        leg: Leg,
        route: CandidateRoute | None,
        now_epoch: int,
    ) -> CandidateTrip | None:
        item = movement.payload
        served = _served(item, leg)
        if served is None:
            return None
        origin, destination = served

        departure = _epoch(origin, "DEP_TIME", "TIME")
        if departure is None:
            return None

        route_id = route.route_id if route else str(item.get("LINEABBREVIATION") or "")
        key = self.trip_key(
            route_id=route_id,
            raw_id=str(item.get("TRAIN_ID") or "").strip() or None,
            departure_epoch=departure,
            service_day=_service_day(item),
        )
        return build_candidate(
            trip_key=key,
            route_id=route_id,
            route_name=route.route_name if route else route_id,
            direction=str(item.get("DESTINATION") or "").strip(),
            departure_epoch=departure,
            arrival_epoch=_epoch(destination, "TIME", "DEP_TIME"),
        )

    def to_timing(
        self, movement: RawMovement, *, leg: Leg, route: CandidateRoute | None
    ) -> LegTiming:
        served = _served(movement.payload, leg)
        if served is None:
            raise NotFound(
                f"Train does not stop at {leg.origin_stop_id} "
                f"before {leg.destination_stop_id}"
            )
        origin, destination = served

        departure = _epoch(origin, "DEP_TIME", "TIME")
        if departure is None:
            raise NotFound(f"No departure time at {leg.origin_stop_id}")
        return LegTiming(
            departure_epoch=departure,
            arrival_epoch=_epoch(destination, "TIME", "DEP_TIME"),
            direction=str(movement.payload.get("DESTINATION") or "").strip() or None,
            origin_stop_name=origin.get("STATIONNAME") or None,
            destination_stop_name=destination.get("STATIONNAME") or None,
        )
