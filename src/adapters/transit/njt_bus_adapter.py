from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

from src.adapters.transit.http_support import strip_prefix
from src.adapters.transit.njt_rest import NjtRestAdapter
from src.domain.exceptions import SourceUnavailable
from src.domain.models import (
    CachedMovement,
    CandidateRoute,
    Leg,
    RawMovement,
    TransitSystem,
)

STOP_PREFIX = "NJTB_"


def njt_bus_stop_code(stop_id: str) -> str:
    return strip_prefix(stop_id, STOP_PREFIX)


@dataclass(slots=True)
class NjtBusAdapter(NjtRestAdapter):
    """NJ Transit bus (BUSDV2): route departures per stop, stop lists per trip.

    Env vars:
      - NJT_BUS_BASE_URL, NJT_API_USERNAME, NJT_API_PASSWORD
      - NJT_BUS_TOKEN_FILE: optional token persistence path
    """

    system: ClassVar[TransitSystem] = TransitSystem.NJT_BUS
    supports_trip_lookup: ClassVar[bool] = True

    base_url_env: ClassVar[str] = "NJT_BUS_BASE_URL"
    default_base_url: ClassVar[str] = "https://pcsdata.njtransit.com/api/BUSDV2"
    token_file_env: ClassVar[str] = "NJT_BUS_TOKEN_FILE"
    login_endpoint: ClassVar[str] = "authenticateUser"

    cache_ttl_s: float = 90.0

    async def list_movements(
        self, *, leg: Leg, route: CandidateRoute | None
    ) -> tuple[RawMovement, ...]:
        route_id = route.route_id if route else ""
        data = await self._post(
            "getRouteTrips",
            {"location": njt_bus_stop_code(leg.origin_stop_id), "route": route_id},
        )
        if not isinstance(data, list):
            raise SourceUnavailable(self.system.value, "getRouteTrips: expected a list")

        return tuple(
            RawMovement(
                system=self.system,
                payload=trip,
                route_id=str(trip.get("public_route") or route_id) or None,
                has_stop_detail=False,
            )
            for trip in data
            if isinstance(trip, dict)
        )

    async def fetch_movement(
        self, *, trip_ref: str, leg: Leg, cached: CachedMovement | None
    ) -> RawMovement:
        trip: dict[str, Any] = {"internal_trip_number": trip_ref}
        route_id = None
        if cached is not None and isinstance(cached.movement.payload, dict):
            listed = cached.movement.payload
            trip = dict(listed.get("trip") or listed)
            route_id = cached.movement.route_id

        stops = await self._post(
            "getTripStops",
            {
                "internal_trip_number": trip_ref,
                "sched_dep_time": str(trip.get("sched_dep_time") or ""),
            },
        )
        if not isinstance(stops, list):
            raise SourceUnavailable(self.system.value, "getTripStops: expected a list")

        return RawMovement(
            system=self.system,
            payload={"trip": trip, "stops": [s for s in stops if isinstance(s, dict)]},
            route_id=route_id,
            has_stop_detail=True,
        )
