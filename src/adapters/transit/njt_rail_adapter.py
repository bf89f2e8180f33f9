from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar

from src.adapters.cache.snapshot_cache import SnapshotCache
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

STOP_PREFIX = "NJTR_"


def njt_rail_station_code(stop_id: str) -> str:
    return strip_prefix(stop_id, STOP_PREFIX).strip().upper()


def serves_route(item: dict[str, Any], route: CandidateRoute) -> bool:
    line = str(item.get("LINEABBREVIATION") or item.get("LINECODE") or "")
    line = line.strip().lower()
    return bool(line) and line in {route.route_name.lower(), route.route_id.lower()}


@dataclass(slots=True)
class NjtRailAdapter(NjtRestAdapter):
    """NJ Transit rail (TrainData): station departure boards with embedded
    stop lists, plus a per-train stop list lookup.

    Env vars:
      - NJT_RAIL_BASE_URL, NJT_API_USERNAME, NJT_API_PASSWORD
      - NJT_RAIL_TOKEN_FILE: optional token persistence path
    """

    system: ClassVar[TransitSystem] = TransitSystem.NJT_RAIL
    supports_trip_lookup: ClassVar[bool] = True

    base_url_env: ClassVar[str] = "NJT_RAIL_BASE_URL"
    default_base_url: ClassVar[str] = "https://raildata.njtransit.com/api/TrainData"
    token_file_env: ClassVar[str] = "NJT_RAIL_TOKEN_FILE"
    login_endpoint: ClassVar[str] = "getToken"

    cache_ttl_s: float = 120.0
    snapshots: SnapshotCache[dict[str, Any]] = field(
        default_factory=lambda: SnapshotCache(ttl_s=20.0)
    )

    async def station_schedule(self, station: str) -> dict[str, Any]:
        async def _load() -> dict[str, Any]:
            data = await self._post("getTrainSchedule", {"station": station})
            if not isinstance(data, dict):
                raise SourceUnavailable(
                    self.system.value, "getTrainSchedule: expected an object"
                )
            return data

        return await self.snapshots.get_or_load(station, _load)

    async def list_movements(
        self, *, leg: Leg, route: CandidateRoute | None
    ) -> tuple[RawMovement, ...]:
        station = njt_rail_station_code(leg.origin_stop_id)
        schedule = await self.station_schedule(station)
        items = schedule.get("ITEMS") or []

        movements: list[RawMovement] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            if route is not None and not serves_route(item, route):
                continue
            movements.append(
                RawMovement(
                    system=self.system,
                    payload=item,
                    route_id=route.route_id if route else None,
                )
            )
        return tuple(movements)

    async def fetch_movement(
        self, *, trip_ref: str, leg: Leg, cached: CachedMovement | None
    ) -> RawMovement:
        data = await self._post("getTrainStopList", {"train": trip_ref})
        if not isinstance(data, dict) or not isinstance(data.get("STOPS"), list):
            raise SourceUnavailable(
                self.system.value, f"getTrainStopList: no stops for train {trip_ref}"
            )
        return RawMovement(
            system=self.system,
            payload=data,
            route_id=cached.movement.route_id if cached else None,
        )
