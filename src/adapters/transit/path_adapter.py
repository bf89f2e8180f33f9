from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, ClassVar

import httpx

from src.adapters.cache.snapshot_cache import SnapshotCache
from src.adapters.transit.http_support import env_float, strip_prefix, upstream_errors
from src.app.ports.output import ITransitSystemAdapter
from src.domain.exceptions import SourceUnavailable
from src.domain.models import CandidateRoute, Leg, RawMovement, TransitSystem

STOP_PREFIX = "PATH_"


def path_station(stop_id: str) -> str:
    return strip_prefix(stop_id, STOP_PREFIX).strip().lower()


@dataclass(slots=True)
class PathAdapter(ITransitSystemAdapter):
    """PATH realtime arrivals, keyed by station name.

    The feed lists upcoming trains per station with no link between
    stations, so trains can be listed but not followed to a destination.

    Env vars:
      - PATH_BASE_URL (default: path.api.razza.dev/v1)
    """

    system: ClassVar[TransitSystem] = TransitSystem.PATH
    supports_trip_lookup: ClassVar[bool] = False

    base_url: str | None = None
    timeout_s: float = 10.0
    cache_ttl_s: float = 60.0
    transport: httpx.AsyncBaseTransport | None = None
    snapshots: SnapshotCache[list[dict[str, Any]]] = field(
        default_factory=lambda: SnapshotCache(ttl_s=15.0)
    )

    def __post_init__(self) -> None:
        if self.base_url is None:
            self.base_url = os.getenv(
                "PATH_BASE_URL", "https://path.api.razza.dev/v1"
            )
        self.timeout_s = env_float("TRANSIT_HTTP_TIMEOUT_S", self.timeout_s)

    async def upcoming_trains(self, station: str) -> list[dict[str, Any]]:
        async def _load() -> list[dict[str, Any]]:
            url = f"{(self.base_url or '').rstrip('/')}/stations/{station}/realtime"
            async with upstream_errors(self.system, f"station '{station}'"):
                async with httpx.AsyncClient(
                    timeout=self.timeout_s, transport=self.transport
                ) as client:
                    resp = await client.get(url)
                    resp.raise_for_status()
                    data = resp.json()
            if not isinstance(data, dict):
                raise SourceUnavailable(
                    self.system.value, "unexpected realtime payload"
                )
            trains = data.get("upcomingTrains") or []
            return [t for t in trains if isinstance(t, dict)]

        return await self.snapshots.get_or_load(station, _load)

    async def list_movements(
        self, *, leg: Leg, route: CandidateRoute | None
    ) -> tuple[RawMovement, ...]:
        trains = await self.upcoming_trains(path_station(leg.origin_stop_id))
        wanted = {route.route_id.upper(), route.route_name.upper()} if route else None
        return tuple(
            RawMovement(
                system=self.system,
                payload=train,
                route_id=str(train.get("route") or "") or None,
                has_stop_detail=False,
            )
            for train in trains
            if wanted is None or str(train.get("route") or "").upper() in wanted
        )
