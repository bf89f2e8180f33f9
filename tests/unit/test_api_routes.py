from __future__ import annotations

from dataclasses import dataclass

import httpx
import pytest
from google.transit import gtfs_realtime_pb2

from src.adapters.api.dependencies import (
    get_commute_service,
    get_feasibility_service,
    get_leg_resolver_service,
    get_mta_subway_adapter,
    get_walk_time_service,
)
from src.adapters.persistence import InMemoryReportRepository
from src.adapters.transit.mta_subway_adapter import MtaSubwayAdapter
from src.app.ports.output import IStopDirectory
from src.app.services.commute_service import CommuteService
from src.app.services.feasibility_service import FeasibilityService
from src.app.services.walk_time_service import WalkTimeService
from src.domain.exceptions import NotFound, SourceUnavailable, UnsupportedSystem
from src.domain.models import (
    CandidateTrip,
    GeoPoint,
    Leg,
    ResolvedLegDetail,
    Stop,
    StopReport,
)
from src.main import app

T = 1_717_000_000

LEG_JSON = {
    "transit_system": "NJT_RAIL",
    "origin_stop_id": "NJTR_TR",
    "destination_stop_id": "NJTR_NY",
    "origin_stop_name": "Trenton",
    "destination_stop_name": "New York Penn Station",
    "candidate_routes": [{"route_id": "NEC", "route_name": "Northeast Corridor"}],
}


def _detail(leg: Leg, departure: int) -> ResolvedLegDetail:
    return ResolvedLegDetail(
        trip_key=f"{leg.transit_system}:NEC:20240529:{departure}",
        route_id="NEC",
        route_name="Northeast Corridor",
        direction="New York",
        origin_stop_id=leg.origin_stop_id,
        origin_stop_name=leg.origin_stop_name,
        destination_stop_id=leg.destination_stop_id,
        destination_stop_name=leg.destination_stop_name,
        departure_epoch=departure,
        arrival_epoch=departure + 45 * 60,
        duration_minutes=45,
    )


@dataclass
class _FakeResolver:
    trips: tuple[CandidateTrip, ...] = ()
    error: Exception | None = None

    def supports(self, transit_system: str) -> bool:
        return transit_system != "PATH"

    def validate(self, leg: Leg, trip_key: str | None = None) -> None:
        return None

    async def list_available_trips(
        self, leg: Leg, min_departure: int | None = None
    ) -> tuple[CandidateTrip, ...]:
        if self.error is not None:
            raise self.error
        return self.trips

    async def resolve_leg(
        self, leg: Leg, min_departure: int | None = None, trip_key: str | None = None
    ) -> ResolvedLegDetail:
        if self.error is not None:
            raise self.error
        return _detail(leg, (min_departure or T) + 300)


@dataclass
class _FakeStopDirectory(IStopDirectory):
    stops: dict[str, Stop]

    def get_stop(self, stop_id: str) -> Stop | None:
        return self.stops.get(stop_id)


async def _request(method: str, url: str, **kwargs) -> httpx.Response:
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.request(method, url, **kwargs)
    app.dependency_overrides.clear()
    return resp


@pytest.mark.unit
@pytest.mark.anyio
async def test_list_trips_returns_ordered_trips() -> None:
    trips = (
        CandidateTrip("NJT_RAIL:NEC:20240529:3842", "NEC", "NEC", "New York", T + 300),
        CandidateTrip(
            "NJT_RAIL:NEC:20240529:3846", "NEC", "NEC", "New York", T + 1200, T + 4000
        ),
    )
    app.dependency_overrides[get_leg_resolver_service] = lambda: _FakeResolver(trips)

    resp = await _request("POST", "/legs/trips", json={"leg": LEG_JSON})

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["available"] is True
    assert [t["trip_key"] for t in payload["trips"]] == [
        "NJT_RAIL:NEC:20240529:3842",
        "NJT_RAIL:NEC:20240529:3846",
    ]
    assert payload["trips"][0]["arrival_epoch"] is None


@pytest.mark.unit
@pytest.mark.anyio
async def test_list_trips_reports_no_service() -> None:
    app.dependency_overrides[get_leg_resolver_service] = lambda: _FakeResolver()

    resp = await _request("POST", "/legs/trips", json={"leg": LEG_JSON})

    assert resp.status_code == 200
    assert resp.json()["available"] is False
    assert "Service may have ended" in resp.json()["message"]


@pytest.mark.unit
@pytest.mark.anyio
async def test_resolve_leg_returns_detail() -> None:
    app.dependency_overrides[get_leg_resolver_service] = lambda: _FakeResolver()

    resp = await _request(
        "POST",
        "/legs/resolve",
        json={"leg": LEG_JSON, "min_departure": "2024-05-29T12:00:00-04:00"},
    )

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["departure_epoch"] == 1716998400 + 300
    assert payload["duration_minutes"] == 45
    assert payload["origin_stop_name"] == "Trenton"


@pytest.mark.unit
@pytest.mark.anyio
@pytest.mark.parametrize(
    ("error", "status"),
    [
        (NotFound("No trips available"), 404),
        (SourceUnavailable("NJT_RAIL", "getTrainSchedule timed out"), 503),
        (UnsupportedSystem("FERRY"), 422),
    ],
)
async def test_resolver_errors_map_to_status(error: Exception, status: int) -> None:
    app.dependency_overrides[get_leg_resolver_service] = lambda: _FakeResolver(
        error=error
    )

    resp = await _request("POST", "/legs/resolve", json={"leg": LEG_JSON})

    assert resp.status_code == status
    assert resp.json()["detail"] == str(error)


@pytest.mark.unit
@pytest.mark.anyio
async def test_unsupported_system_is_flagged() -> None:
    app.dependency_overrides[get_leg_resolver_service] = lambda: _FakeResolver(
        error=UnsupportedSystem("FERRY")
    )

    resp = await _request("POST", "/legs/trips", json={"leg": LEG_JSON})

    assert resp.status_code == 422
    assert resp.json()["unsupported"] is True
    assert resp.json()["system"] == "FERRY"


@pytest.mark.unit
@pytest.mark.anyio
@pytest.mark.parametrize("overrides", [{"1": 8}, [None, 8]])
async def test_calculate_commute_chains_legs(overrides: object) -> None:
    app.dependency_overrides[get_commute_service] = lambda: CommuteService(
        resolver=_FakeResolver()  # type: ignore[arg-type]
    )
    second = {
        **LEG_JSON,
        "transit_system": "MTA_SUBWAY",
        "origin_stop_id": "MTA_SUBWAY_128S",
        "destination_stop_id": "MTA_SUBWAY_137S",
    }

    resp = await _request(
        "POST",
        "/commutes/calculate",
        json={
            "legs": [LEG_JSON, second],
            "min_departure": "2024-05-29T12:00:00-04:00",
            "walk_time_overrides": overrides,
        },
    )

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["success"] is True
    assert [leg["status"] for leg in payload["legs"]] == ["resolved", "resolved"]
    assert payload["walk_times"] == [{"leg_index": 1, "minutes": 8, "source": "custom"}]
    first_arrival = payload["legs"][0]["detail"]["arrival_epoch"]
    assert payload["legs"][1]["detail"]["departure_epoch"] == first_arrival + 13 * 60
    assert payload["totals"]["total_walk_minutes"] == 8


@pytest.mark.unit
@pytest.mark.anyio
async def test_calculate_commute_reports_unsupported_leg() -> None:
    app.dependency_overrides[get_commute_service] = lambda: CommuteService(
        resolver=_FakeResolver()  # type: ignore[arg-type]
    )
    path_leg = {**LEG_JSON, "transit_system": "PATH"}

    resp = await _request("POST", "/commutes/calculate", json={"legs": [path_leg]})

    assert resp.status_code == 200
    payload = resp.json()
    assert payload["success"] is False
    assert payload["legs"][0]["status"] == "unsupported"
    assert payload["totals"] is None


@pytest.mark.unit
@pytest.mark.anyio
async def test_calculate_commute_rejects_bad_beginning_index() -> None:
    app.dependency_overrides[get_commute_service] = lambda: CommuteService(
        resolver=_FakeResolver()  # type: ignore[arg-type]
    )

    resp = await _request(
        "POST",
        "/commutes/calculate",
        json={"legs": [LEG_JSON], "beginning_leg_index": 4},
    )

    assert resp.status_code == 400


@pytest.mark.unit
@pytest.mark.anyio
async def test_feasibility_scores_reports() -> None:
    repository = InMemoryReportRepository(
        reports=(
            StopReport("r1", ("NJTR_TR",), severity=8),
            StopReport("r2", ("NJTR_NY",), severity=2, status="resolved"),
        )
    )
    app.dependency_overrides[get_feasibility_service] = lambda: FeasibilityService(
        report_repository=repository
    )

    resp = await _request(
        "POST", "/feasibility", json={"stop_ids": ["NJTR_TR", "NJTR_NY"]}
    )

    assert resp.status_code == 200
    # (2 + 10) / 2
    assert resp.json() == {
        "score": 6,
        "level": "moderate",
        "message": "Some issues reported on this route",
        "report_count": 1,
    }


@pytest.mark.unit
@pytest.mark.anyio
async def test_walk_time_uses_stop_coordinates() -> None:
    directory = _FakeStopDirectory(
        {
            "A": Stop("A", "Hoboken", GeoPoint(lat=40.7359, lon=-74.0303)),
            "B": Stop("B", "Hoboken Terminal", GeoPoint(lat=40.7362, lon=-74.0290)),
            "C": Stop("C", "No coordinates"),
        }
    )
    app.dependency_overrides[get_walk_time_service] = lambda: WalkTimeService(
        stop_directory=directory
    )
    resp = await _request("GET", "/walk-time", params={"from": "A", "to": "B"})

    assert resp.status_code == 200
    assert resp.json()["estimated"] is False
    assert 1 <= resp.json()["minutes"] <= 3

    app.dependency_overrides[get_walk_time_service] = lambda: WalkTimeService(
        stop_directory=directory
    )
    resp = await _request("GET", "/walk-time", params={"from": "A", "to": "C"})
    assert resp.json()["minutes"] == 5
    assert resp.json()["estimated"] is True

    app.dependency_overrides[get_walk_time_service] = lambda: WalkTimeService(
        stop_directory=directory
    )
    resp = await _request("GET", "/walk-time", params={"from": "A", "to": "Z"})
    assert resp.status_code == 404


@pytest.mark.unit
@pytest.mark.anyio
async def test_subway_alerts_endpoint() -> None:
    feed = gtfs_realtime_pb2.FeedMessage()
    feed.header.gtfs_realtime_version = "2.0"
    feed.header.timestamp = T
    alert = feed.entity.add(id="lmm:planned_work:1").alert
    alert.header_text.translation.add(text="No 1 trains between 96 St and 137 St")
    alert.informed_entity.add(route_id="1")
    body = feed.SerializeToString()

    adapter = MtaSubwayAdapter(
        base_url="https://feeds.test/mtagtfsfeeds",
        api_key="",
        transport=httpx.MockTransport(lambda r: httpx.Response(200, content=body)),
    )
    app.dependency_overrides[get_mta_subway_adapter] = lambda: adapter

    resp = await _request("GET", "/systems/MTA_SUBWAY/alerts")

    assert resp.status_code == 200
    alerts = resp.json()["alerts"]
    assert alerts[0]["alert_id"] == "lmm:planned_work:1"
    assert alerts[0]["route_ids"] == ["1"]


@pytest.mark.unit
@pytest.mark.anyio
async def test_unknown_alert_group_is_bad_request() -> None:
    adapter = MtaSubwayAdapter(
        base_url="https://feeds.test/mtagtfsfeeds",
        api_key="",
        transport=httpx.MockTransport(lambda r: httpx.Response(500)),
    )
    app.dependency_overrides[get_mta_subway_adapter] = lambda: adapter

    resp = await _request("GET", "/systems/MTA_SUBWAY/alerts", params={"group": "xyz"})

    assert resp.status_code == 400


@pytest.mark.unit
@pytest.mark.anyio
async def test_health() -> None:
    resp = await _request("GET", "/health")
    assert resp.json() == {"status": "ok"}
