from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, ClassVar

import httpx

from src.adapters.transit.http_support import env_float, strip_prefix, upstream_errors
from src.app.ports.output import ITransitSystemAdapter
from src.domain.exceptions import SourceUnavailable
from src.domain.models import CandidateRoute, Leg, RawMovement, TransitSystem


def siri_stop_ref(stop_id: str) -> str:
    """'MTA_BUS_100860' (or a bare '100860') -> 'MTA_100860'."""

    return "MTA_" + strip_prefix(stop_id, "MTA_BUS_", "MTA_SUBWAY_", "MTA_")


def _monitored_journeys(data: Any) -> list[dict[str, Any]]:
    delivery = data["Siri"]["ServiceDelivery"]
    deliveries = delivery.get("StopMonitoringDelivery") or []
    if not deliveries:
        return []
    first = deliveries[0]
    error = first.get("ErrorCondition")
    if error:
        if isinstance(error, dict):
            error = error.get("Description") or error
        raise SourceUnavailable(TransitSystem.MTA_BUS.value, str(error))
    visits = first.get("MonitoredStopVisit") or []
    return [
        v["MonitoredVehicleJourney"]
        for v in visits
        if isinstance(v, dict) and isinstance(v.get("MonitoredVehicleJourney"), dict)
    ]


@dataclass(slots=True)
class MtaBusAdapter(ITransitSystemAdapter):
    """Queries MTA Bus Time SIRI StopMonitoring, one call per stop and route.

    Env vars:
      - MTA_BUSTIME_URL: stop-monitoring endpoint
      - MTA_BUS_API_KEY: Bus Time developer key
      - TRANSIT_HTTP_TIMEOUT_S: request timeout (default 10)
    """

    system: ClassVar[TransitSystem] = TransitSystem.MTA_BUS
    supports_trip_lookup: ClassVar[bool] = False

    url: str | None = None
    api_key: str | None = None
    timeout_s: float = 10.0
    cache_ttl_s: float = 60.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv(
                "MTA_BUSTIME_URL",
                "https://bustime.mta.info/api/siri/stop-monitoring.json",
            )
        if self.api_key is None:
            self.api_key = os.getenv("MTA_BUS_API_KEY")
        self.timeout_s = env_float("TRANSIT_HTTP_TIMEOUT_S", self.timeout_s)

    def _params(self, stop_ref: str, line_ref: str | None) -> dict[str, str]:
        params = {
            "version": "2",
            "MonitoringRef": stop_ref,
            "StopMonitoringDetailLevel": "calls",
        }
        if self.api_key:
            params["key"] = self.api_key
        if line_ref:
            params["LineRef"] = line_ref
        return params

    async def list_movements(
        self, *, leg: Leg, route: CandidateRoute | None
    ) -> tuple[RawMovement, ...]:
        if not self.url:
            raise SourceUnavailable(self.system.value, "MTA_BUSTIME_URL is not set")

        line_ref = route.route_id if route else None
        params = self._params(siri_stop_ref(leg.origin_stop_id), line_ref)

        async with upstream_errors(self.system, "stop monitoring"):
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.get(self.url, params=params)
                resp.raise_for_status()
                data = resp.json()
            try:
                journeys = _monitored_journeys(data)
            except (KeyError, TypeError) as exc:
                raise ValueError("unexpected SIRI envelope") from exc

        return tuple(
            RawMovement(
                system=self.system,
                payload=mvj,
                route_id=mvj.get("LineRef") or line_ref,
            )
            for mvj in journeys
        )
