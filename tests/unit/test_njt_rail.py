from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from src.adapters.transit.njt_rail_adapter import (
    NjtRailAdapter,
    njt_rail_station_code,
    serves_route,
)
from src.adapters.transit.normalizers import NjtRailNormalizer
from src.domain.exceptions import NotFound, SourceUnavailable
from src.domain.models import CandidateRoute, Leg, RawMovement, TransitSystem

NEC = CandidateRoute(route_id="NEC", route_name="Northeast Corridor")
LEG = Leg(
    transit_system="NJT_RAIL",
    origin_stop_id="NJTR_TR",
    destination_stop_id="NJTR_NY",
    candidate_routes=(NEC,),
)


def _stop(code: str, name: str, time: str, dep: str | None = None) -> dict:
    stop = {"STATION_2CHAR": code, "STATIONNAME": name, "TIME": time}
    if dep:
        stop["DEP_TIME"] = dep
    return stop


ITEM = {
    "TRAIN_ID": "3842",
    "LINEABBREVIATION": "NEC",
    "DESTINATION": "New York Penn Station",
    "SCHED_DEP_DATE": "29-May-2024 11:58:00 AM",
    "STOPS": [
        _stop("TR", "Trenton", "29-May-2024 11:58:00 AM", "29-May-2024 12:00:00 PM"),
        _stop("NP", "Newark Penn Station", "29-May-2024 12:55:00 PM"),
        _stop("NY", "New York Penn Station", "29-May-2024 01:12:00 PM"),
    ],
}
RVL_ITEM = {**ITEM, "TRAIN_ID": "5412", "LINEABBREVIATION": "RVL"}


def _utc(hour: int, minute: int) -> int:
    return int(datetime(2024, 5, 29, hour, minute, tzinfo=timezone.utc).timestamp())


class FakeRailData:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.rsplit("/", 1)[-1]
        self.calls.append(endpoint)
        body = request.read().decode("utf-8", errors="replace")
        if endpoint == "getToken":
            return httpx.Response(200, json={"Authenticated": "True", "UserToken": "t"})
        if endpoint == "getTrainSchedule":
            assert "TR" in body
            return httpx.Response(
                200, json={"STATION_2CHAR": "TR", "ITEMS": [ITEM, RVL_ITEM]}
            )
        if endpoint == "getTrainStopList":
            if "\r\n\r\n3842\r\n" in body:
                return httpx.Response(200, json={**ITEM})
            return httpx.Response(200, json={"errorMessage": "Train not found"})
        return httpx.Response(404)


def _adapter(fake: FakeRailData) -> NjtRailAdapter:
    return NjtRailAdapter(
        base_url="https://rail.test/api/TrainData",
        username="user",
        password="pass",
        transport=httpx.MockTransport(fake),
    )


def test_station_code() -> None:
    assert njt_rail_station_code("NJTR_ny") == "NY"


def test_serves_route_matches_abbreviation_or_name() -> None:
    assert serves_route(ITEM, NEC)
    assert serves_route({"LINECODE": "Northeast Corridor"}, NEC)
    assert not serves_route(RVL_ITEM, NEC)
    assert not serves_route({}, NEC)


def test_routes_share_one_station_fetch() -> None:
    fake = FakeRailData()
    adapter = _adapter(fake)
    rvl = CandidateRoute(route_id="RVL", route_name="Raritan Valley")

    async def run() -> tuple[int, int]:
        nec_moves = await adapter.list_movements(leg=LEG, route=NEC)
        rvl_moves = await adapter.list_movements(leg=LEG, route=rvl)
        return len(nec_moves), len(rvl_moves)

    assert asyncio.run(run()) == (1, 1)
    assert fake.calls.count("getTrainSchedule") == 1


def test_unknown_train_lookup_is_source_unavailable() -> None:
    adapter = _adapter(FakeRailData())

    with pytest.raises(SourceUnavailable):
        asyncio.run(adapter.fetch_movement(trip_ref="9999", leg=LEG, cached=None))


def test_fetch_movement_returns_stop_list() -> None:
    adapter = _adapter(FakeRailData())

    movement = asyncio.run(
        adapter.fetch_movement(trip_ref="3842", leg=LEG, cached=None)
    )
    assert movement.has_stop_detail is True
    assert len(movement.payload["STOPS"]) == 3


def test_candidate_from_departure_board() -> None:
    movement = RawMovement(system=TransitSystem.NJT_RAIL, payload=ITEM, route_id="NEC")
    trip = NjtRailNormalizer().to_candidate(movement, leg=LEG, route=NEC, now_epoch=0)

    assert trip is not None
    assert trip.trip_key == "NJT_RAIL:NEC:20240529:3842"
    assert trip.direction == "New York Penn Station"
    # DEP_TIME beats TIME at the origin.
    assert trip.origin_departure_epoch == _utc(16, 0)
    assert trip.destination_arrival_epoch == _utc(17, 12)


def test_train_not_reaching_destination_is_dropped() -> None:
    item = {**ITEM, "STOPS": ITEM["STOPS"][:2]}
    movement = RawMovement(system=TransitSystem.NJT_RAIL, payload=item)
    trip = NjtRailNormalizer().to_candidate(movement, leg=LEG, route=NEC, now_epoch=0)
    assert trip is None


def test_timing_requires_origin_before_destination() -> None:
    reverse = Leg(
        transit_system="NJT_RAIL",
        origin_stop_id="NJTR_NY",
        destination_stop_id="NJTR_TR",
        candidate_routes=(NEC,),
    )
    movement = RawMovement(system=TransitSystem.NJT_RAIL, payload=ITEM)
    with pytest.raises(NotFound):
        NjtRailNormalizer().to_timing(movement, leg=reverse, route=NEC)


def test_timing_carries_station_names() -> None:
    movement = RawMovement(system=TransitSystem.NJT_RAIL, payload=ITEM)
    timing = NjtRailNormalizer().to_timing(movement, leg=LEG, route=NEC)

    assert timing.origin_stop_name == "Trenton"
    assert timing.destination_stop_name == "New York Penn Station"
    assert timing.arrival_epoch == _utc(17, 12)
