from __future__ import annotations

import logging
from typing import Any

from src.adapters.transit.mta_bus_adapter import siri_stop_ref
from src.adapters.transit.normalizers.base import TripNormalizer, build_candidate
from src.domain.algorithms.timestamps import parse_iso_epoch
from src.domain.exceptions import NotFound
from src.domain.models import (
    CandidateRoute,
    CandidateTrip,
    Leg,
    LegTiming,
    RawMovement,
    TransitSystem,
)

logger = logging.getLogger(__name__)

# Origin and destination calls are read in the same order in listing and
# resolution so a listed departure matches the resolved one.
CALL_TIME_FIELDS = (
    "ExpectedArrivalTime",
    "AimedArrivalTime",
    "ExpectedDepartureTime",
    "AimedDepartureTime",
)


def _text(value: Any) -> str | None:
    # SIRI v2 JSON renders some NLString fields as single-item lists.
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("value")
    if value is None:
        return None
    return str(value).strip() or None


def call_epoch(call: dict[str, Any] | None, keys: tuple[str, ...]) -> int | None:
    if not call:
        return None
    for key in keys:
        epoch = parse_iso_epoch(call.get(key))
        if epoch is not None:
            return epoch
    return None


def onward_call(mvj: dict[str, Any], stop_ref: str) -> dict[str, Any] | None:
    calls = (mvj.get("OnwardCalls") or {}).get("OnwardCall") or []
    for call in calls:
        if isinstance(call, dict) and call.get("StopPointRef") == stop_ref:
            return call
    return None


def serves_destination(mvj: dict[str, Any], stop_ref: str) -> bool:
    if onward_call(mvj, stop_ref) is not None:
        return True
    return mvj.get("DestinationRef") == stop_ref


class MtaBusNormalizer(TripNormalizer):
    system = TransitSystem.MTA_BUS

    def to_candidate(
        self,
        movement: RawMovement,
        *,
        leg: Leg,
        route: CandidateRoute | None,
        now_epoch: int,
    ) -> CandidateTrip | None:
        mvj = movement.payload
        departure = call_epoch(mvj.get("MonitoredCall"), CALL_TIME_FIELDS)
        if departure is None:
            return None

        destination_ref = siri_stop_ref(leg.destination_stop_id)
        if not serves_destination(mvj, destination_ref):
            logger.debug(
                "Dropping bus journey %s: %s not in onward calls",
                _text(mvj.get("VehicleRef")),
                destination_ref,
            )
            return None

        framed = mvj.get("FramedVehicleJourneyRef") or {}
        day = str(framed.get("DataFrameRef") or "").replace("-", "") or None
        route_id = str(mvj.get("LineRef") or (route.route_id if route else ""))
        key = self.trip_key(
            route_id=route_id,
            raw_id=framed.get("DatedVehicleJourneyRef"),
            departure_epoch=departure,
            service_day=day,
        )
        return build_candidate(
            trip_key=key,
            route_id=route_id,
            route_name=route.route_name if route else route_id,
            direction=_text(mvj.get("DestinationName")) or "",
            departure_epoch=departure,
            arrival_epoch=call_epoch(
                onward_call(mvj, destination_ref), CALL_TIME_FIELDS
            ),
        )

    def to_timing(
        self, movement: RawMovement, *, leg: Leg, route: CandidateRoute | None
    ) -> LegTiming:
        mvj = movement.payload
        monitored = mvj.get("MonitoredCall") or {}
        departure = call_epoch(monitored, CALL_TIME_FIELDS)
        if departure is None:
            raise NotFound(f"No departure time at {leg.origin_stop_id}")

        destination_ref = siri_stop_ref(leg.destination_stop_id)
        if not serves_destination(mvj, destination_ref):
            raise NotFound(f"Bus no longer serves {leg.destination_stop_id}")
        destination = onward_call(mvj, destination_ref)
        return LegTiming(
            departure_epoch=departure,
            arrival_epoch=call_epoch(destination, CALL_TIME_FIELDS),
            direction=_text(mvj.get("DestinationName")),
            origin_stop_name=_text(monitored.get("StopPointName")),
            destination_stop_name=_text((destination or {}).get("StopPointName")),
        )
