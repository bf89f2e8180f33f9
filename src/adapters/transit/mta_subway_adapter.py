from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import ClassVar

import httpx

from src.adapters.cache.snapshot_cache import SnapshotCache
from src.adapters.transit.gtfs_realtime import (
    FeedEntities,
    alert_from_entity,
    decode_feed,
    split_feed,
)
from src.adapters.transit.http_support import (
    env_float,
    parse_headers,
    strip_prefix,
    upstream_errors,
)
from src.app.ports.output import ITransitSystemAdapter
from src.domain.exceptions import InvalidInput, SourceUnavailable
from src.domain.models import (
    CandidateRoute,
    Leg,
    RawMovement,
    ServiceAlert,
    TransitSystem,
)

logger = logging.getLogger(__name__)

STOP_PREFIX = "MTA_SUBWAY_"

SUBWAY_FEED_GROUPS: tuple[str, ...] = (
    "gtfs",
    "ace",
    "bdfm",
    "g",
    "jz",
    "nqrw",
    "l",
    "7",
    "si",
)

ROUTE_FEED_GROUPS: dict[str, str] = {
    "1": "gtfs",
    "2": "gtfs",
    "3": "gtfs",
    "4": "gtfs",
    "5": "gtfs",
    "6": "gtfs",
    "6X": "gtfs",
    "GS": "gtfs",
    "A": "ace",
    "C": "ace",
    "E": "ace",
    "H": "ace",
    "FS": "ace",
    "B": "bdfm",
    "D": "bdfm",
    "F": "bdfm",
    "FX": "bdfm",
    "M": "bdfm",
    "G": "g",
    "J": "jz",
    "Z": "jz",
    "N": "nqrw",
    "Q": "nqrw",
    "R": "nqrw",
    "W": "nqrw",
    "L": "l",
    "7": "7",
    "7X": "7",
    "SI": "si",
    "SIR": "si",
}


def feed_groups_for(route_id: str | None) -> tuple[str, ...]:
    """Feeds that may carry `route_id`; every feed when it is unknown."""

    group = ROUTE_FEED_GROUPS.get((route_id or "").strip().upper())
    if group is None:
        return SUBWAY_FEED_GROUPS
    return (group,)


def feed_path(group: str) -> str:
    # The numbered-lines feed is the bare "gtfs" feed, not "gtfs-gtfs".
    if group == "gtfs":
        return "/nyct%2Fgtfs"
    return f"/nyct%2Fgtfs-{group}"


def subway_stop_code(stop_id: str) -> str:
    return strip_prefix(stop_id, STOP_PREFIX)


@dataclass(slots=True)
class MtaSubwayAdapter(ITransitSystemAdapter):
    """Reads NYCT subway trip updates from the MTA GTFS-realtime feeds.

    Env vars:
      - MTA_GTFS_BASE_URL: feed base (default: api-endpoint.mta.info)
      - MTA_API_KEY: optional, sent as x-api-key
      - MTA_GTFS_HEADERS: optional extra headers, as 'Key:Value;Key2:Value2'
      - TRANSIT_HTTP_TIMEOUT_S: request timeout (default 10)
    """

    system: ClassVar[TransitSystem] = TransitSystem.MTA_SUBWAY
    supports_trip_lookup: ClassVar[bool] = False

    base_url: str | None = None
    api_key: str | None = None
    headers_raw: str | None = None
    timeout_s: float = 10.0
    cache_ttl_s: float = 120.0
    transport: httpx.AsyncBaseTransport | None = None
    snapshots: SnapshotCache[FeedEntities] = field(
        default_factory=lambda: SnapshotCache(ttl_s=15.0)
    )

    def __post_init__(self) -> None:
        if self.base_url is None:
            self.base_url = os.getenv(
                "MTA_GTFS_BASE_URL",
                "https://api-endpoint.mta.info/Dataservice/mtagtfsfeeds",
            )
        if self.api_key is None:
            self.api_key = os.getenv("MTA_API_KEY")
        if self.headers_raw is None:
            self.headers_raw = os.getenv("MTA_GTFS_HEADERS")
        self.timeout_s = env_float("TRANSIT_HTTP_TIMEOUT_S", self.timeout_s)

    def _headers(self) -> dict[str, str]:
        headers = parse_headers(self.headers_raw)
        if self.api_key:
            headers.setdefault("x-api-key", self.api_key)
        return headers

    def feed_url(self, group: str) -> str:
        return (self.base_url or "").rstrip("/") + feed_path(group)

    async def fetch_feed(self, group: str) -> FeedEntities:
        async def _load() -> FeedEntities:
            async with upstream_errors(self.system, f"subway feed '{group}'"):
                async with httpx.AsyncClient(
                    timeout=self.timeout_s, transport=self.transport
                ) as client:
                    resp = await client.get(
                        self.feed_url(group), headers=self._headers()
                    )
                    resp.raise_for_status()
                    content = resp.content
                return split_feed(decode_feed(content))

        return await self.snapshots.get_or_load(group, _load)

    async def _fetch_groups(
        self, groups: tuple[str, ...]
    ) -> list[tuple[str, FeedEntities]]:
        results = await asyncio.gather(
            *(self.fetch_feed(g) for g in groups), return_exceptions=True
        )
        out: list[tuple[str, FeedEntities]] = []
        failures: list[SourceUnavailable] = []
        for group, result in zip(groups, results):
            if isinstance(result, SourceUnavailable):
                logger.warning("Skipping subway feed %s: %s", group, result.detail)
                failures.append(result)
                continue
            if isinstance(result, BaseException):
                raise result
            out.append((group, result))
        if failures and not out:
            raise failures[0]
        return out

    async def list_movements(
        self, *, leg: Leg, route: CandidateRoute | None
    ) -> tuple[RawMovement, ...]:
        route_id = route.route_id if route else None
        origin = subway_stop_code(leg.origin_stop_id)

        movements: list[RawMovement] = []
        for group, feed in await self._fetch_groups(feed_groups_for(route_id)):
            for trip_update in feed.trip_updates:
                trip_route = trip_update.trip.route_id
                if route_id and trip_route != route_id:
                    continue
                stops = trip_update.stop_time_update
                if not any(stu.stop_id == origin for stu in stops):
                    continue
                movements.append(
                    RawMovement(
                        system=self.system,
                        payload=trip_update,
                        route_id=trip_route or route_id,
                        feed_group=group,
                    )
                )
        return tuple(movements)

    async def list_alerts(self, group: str | None = None) -> tuple[ServiceAlert, ...]:
        if group and group not in SUBWAY_FEED_GROUPS:
            raise InvalidInput(f"Unknown subway feed group: {group}")
        groups = (group,) if group else SUBWAY_FEED_GROUPS
        alerts: list[ServiceAlert] = []
        for _, feed in await self._fetch_groups(groups):
            alerts.extend(alert_from_entity(aid, alert) for aid, alert in feed.alerts)
        return tuple(alerts)
