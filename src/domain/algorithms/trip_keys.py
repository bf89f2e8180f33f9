from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, unquote

from src.domain.models import TransitSystem

MINTED_PREFIX = "~"


@dataclass(frozen=True, slots=True)
class TripKeyParts:
    system: TransitSystem
    route_id: str
    service_date: str
    raw_id: str

    @property
    def is_minted(self) -> bool:
        return self.raw_id.startswith(MINTED_PREFIX)


def _route_token(route_id: str) -> str:
    return quote(route_id, safe=" _-.")


def make_trip_key(
    system: TransitSystem, *, route_id: str, service_date: str, raw_id: str
) -> str:
    """Key for a movement the source identifies itself."""

    return f"{system.value}:{_route_token(route_id)}:{service_date}:{raw_id}"


def mint_trip_key(
    system: TransitSystem, *, route_id: str, service_date: str, departure_epoch: int
) -> str:
    """Key for a movement with no source identifier, bucketed by minute."""

    raw = f"{MINTED_PREFIX}{departure_epoch // 60}"
    return make_trip_key(
        system, route_id=route_id, service_date=service_date, raw_id=raw
    )


def parse_trip_key(trip_key: str) -> TripKeyParts | None:
    parts = (trip_key or "").split(":", 3)
    if len(parts) != 4:
        return None
    system = TransitSystem.parse(parts[0])
    if system is None or not parts[3]:
        return None
    return TripKeyParts(
        system=system,
        route_id=unquote(parts[1]),
        service_date=parts[2],
        raw_id=parts[3],
    )
