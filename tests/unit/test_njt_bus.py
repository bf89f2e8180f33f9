from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from src.adapters.transit.njt_bus_adapter import NjtBusAdapter, njt_bus_stop_code
from src.adapters.transit.normalizers import NjtBusNormalizer
from src.adapters.transit.normalizers.njt_bus import departure_epoch, matching_direction
from src.domain.exceptions import AuthenticationFailed, NotFound, SourceUnavailable
from src.domain.models import (
    CachedMovement,
    CandidateRoute,
    Leg,
    RawMovement,
    TransitSystem,
    ValidDirection,
)

ROUTE = CandidateRoute(
    route_id="125",
    route_name="125",
    valid_directions=(ValidDirection("1", "125 NEW YORK"),),
)
LEG = Leg(
    transit_system="NJT_BUS",
    origin_stop_id="NJTB_20883",
    destination_stop_id="NJTB_26229",
    candidate_routes=(ROUTE,),
)

TRIP = {
    "public_route": "125",
    "header": "NEW YORK",
    "internal_trip_number": "19628722",
    "sched_dep_time": "05/29/2024 12:00:00 PM",
    "departuretime": "12:03 PM",
}
STOPS = [
    {"StopID": "20880", "Description": "JOURNAL SQUARE", "ApproxTime": ""},
    {
        "StopID": "20883",
        "Description": "JFK BLVD AT SIP AVE",
        "ApproxTime": "05/29/2024 12:04:00 PM",
        "SchedDepTime": "05/29/2024 12:02:00 PM",
    },
    {
        "StopID": "26229",
        "Description": "PORT AUTHORITY BUS TERMINAL",
        "SchedDepTime": "05/29/2024 12:31:00 PM",
    },
]


def _utc(hour: int, minute: int) -> int:
    return int(datetime(2024, 5, 29, hour, minute, tzinfo=timezone.utc).timestamp())


def _form_text(request: httpx.Request) -> str:
    return request.read().decode("utf-8", errors="replace")


class FakeNjtBus:
    def __init__(self, *, reject_first_trips_call: bool = False) -> None:
        self.calls: list[str] = []
        self.logins = 0
        self.reject_first_trips_call = reject_first_trips_call

    def __call__(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.rsplit("/", 1)[-1]
        self.calls.append(endpoint)
        body = _form_text(request)
        if endpoint == "authenticateUser":
            self.logins += 1
            return httpx.Response(
                200,
                json={"Authenticated": "True", "UserToken": f"tok-{self.logins}"},
            )
        assert "tok-" in body
        if endpoint == "getRouteTrips":
            if self.reject_first_trips_call:
                self.reject_first_trips_call = False
                return httpx.Response(401, json={"errorMessage": "Invalid token"})
            return httpx.Response(200, json=[TRIP])
        if endpoint == "getTripStops":
            return httpx.Response(200, json=STOPS)
        return httpx.Response(404)


def _adapter(handler: FakeNjtBus) -> NjtBusAdapter:
    return NjtBusAdapter(
        base_url="https://njt.test/api/BUSDV2",
        username="user",
        password="pass",
        transport=httpx.MockTransport(handler),
    )


def test_stop_code_strips_prefix() -> None:
    assert njt_bus_stop_code("NJTB_20883") == "20883"
    assert njt_bus_stop_code("20883") == "20883"


def test_list_movements_logs_in_once_and_lists_trips() -> None:
    fake = FakeNjtBus()
    adapter = _adapter(fake)

    async def run() -> None:
        first = await adapter.list_movements(leg=LEG, route=ROUTE)
        second = await adapter.list_movements(leg=LEG, route=ROUTE)
        assert len(first) == len(second) == 1
        assert first[0].has_stop_detail is False
        assert first[0].route_id == "125"

    asyncio.run(run())
    assert fake.logins == 1
    assert fake.calls == ["authenticateUser", "getRouteTrips", "getRouteTrips"]


def test_rejected_token_is_dropped_and_next_call_reauthenticates() -> None:
    fake = FakeNjtBus(reject_first_trips_call=True)
    adapter = _adapter(fake)

    async def run() -> None:
        with pytest.raises(AuthenticationFailed):
            await adapter.list_movements(leg=LEG, route=ROUTE)
        movements = await adapter.list_movements(leg=LEG, route=ROUTE)
        assert len(movements) == 1

    asyncio.run(run())
    assert fake.logins == 2


def test_rejected_login_is_authentication_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"Authenticated": "False", "errorMessage": "bad password"}
        )

    adapter = NjtBusAdapter(
        base_url="https://njt.test/api/BUSDV2",
        username="user",
        password="wrong",
        transport=httpx.MockTransport(handler),
    )
    with pytest.raises(AuthenticationFailed) as err:
        asyncio.run(adapter.list_movements(leg=LEG, route=ROUTE))
    assert isinstance(err.value, SourceUnavailable)
    assert "bad password" in str(err.value)


def test_fetch_movement_attaches_stop_list() -> None:
    fake = FakeNjtBus()
    adapter = _adapter(fake)

    async def run() -> RawMovement:
        listed = await adapter.list_movements(leg=LEG, route=ROUTE)
        cached = CachedMovement(movement=listed[0], cached_at=0.0, ttl_s=90.0)
        return await adapter.fetch_movement(trip_ref="19628722", leg=LEG, cached=cached)

    movement = asyncio.run(run())
    assert movement.has_stop_detail is True
    assert movement.payload["trip"]["header"] == "NEW YORK"
    assert len(movement.payload["stops"]) == 3
    assert fake.calls[-1] == "getTripStops"


def test_matching_direction_ignores_route_number() -> None:
    assert matching_direction("NEW YORK", ROUTE) == ROUTE.valid_directions[0]
    assert matching_direction("JOURNAL SQUARE", ROUTE) is None
    assert matching_direction(None, ROUTE) is None


def test_departure_prefers_displayed_time() -> None:
    assert departure_epoch(TRIP, now_epoch=_utc(15, 0)) == _utc(16, 3)

    relative = {**TRIP, "departuretime": "in 18 mins"}
    assert departure_epoch(relative, now_epoch=_utc(15, 0)) == _utc(15, 18)

    scheduled_only = {**TRIP, "departuretime": ""}
    assert departure_epoch(scheduled_only, now_epoch=_utc(15, 0)) == _utc(16, 0)


def test_candidate_uses_stored_direction_and_trip_number() -> None:
    movement = RawMovement(system=TransitSystem.NJT_BUS, payload=TRIP, route_id="125")
    trip = NjtBusNormalizer().to_candidate(
        movement, leg=LEG, route=ROUTE, now_epoch=_utc(15, 0)
    )

    assert trip is not None
    assert trip.trip_key == "NJT_BUS:125:20240529:19628722"
    assert trip.direction == "125 NEW YORK"
    assert trip.origin_departure_epoch == _utc(16, 3)
    assert trip.destination_arrival_epoch is None


def test_candidate_in_wrong_direction_is_dropped() -> None:
    movement = RawMovement(
        system=TransitSystem.NJT_BUS,
        payload={**TRIP, "header": "JOURNAL SQUARE"},
        route_id="125",
    )
    assert (
        NjtBusNormalizer().to_candidate(movement, leg=LEG, route=ROUTE, now_epoch=0)
        is None
    )


def test_timing_reads_stop_list() -> None:
    movement = RawMovement(
        system=TransitSystem.NJT_BUS, payload={"trip": TRIP, "stops": STOPS}
    )
    timing = NjtBusNormalizer().to_timing(movement, leg=LEG, route=ROUTE)

    assert timing.departure_epoch == _utc(16, 4)
    assert timing.arrival_epoch == _utc(16, 31)
    assert timing.direction == "125 NEW YORK"
    assert timing.destination_stop_name == "PORT AUTHORITY BUS TERMINAL"


def test_timing_rejects_reversed_stop_order() -> None:
    movement = RawMovement(
        system=TransitSystem.NJT_BUS,
        payload={"trip": TRIP, "stops": list(reversed(STOPS))},
    )
    with pytest.raises(NotFound):
        NjtBusNormalizer().to_timing(movement, leg=LEG, route=ROUTE)
