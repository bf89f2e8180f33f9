from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TransitSystem(str, Enum):
    NJT_BUS = "NJT_BUS"
    NJT_RAIL = "NJT_RAIL"
    MTA_BUS = "MTA_BUS"
    MTA_SUBWAY = "MTA_SUBWAY"
    PATH = "PATH"

    @classmethod
    def parse(cls, raw: str | None) -> "TransitSystem | None":
        value = (raw or "").strip().upper()
        for member in cls:
            if member.value == value:
                return member
        return None


@dataclass(frozen=True, slots=True)
class ValidDirection:
    """One direction of a route that serves origin before destination."""

    direction_id: str
    direction_name: str
    origin_stop_order: int | None = None
    destination_stop_order: int | None = None


@dataclass(frozen=True, slots=True)
class CandidateRoute:
    route_id: str
    route_name: str
    valid_directions: tuple[ValidDirection, ...] = ()


@dataclass(frozen=True, slots=True)
class Leg:
    """An origin -> destination hop on a single transit system.

    `transit_system` is kept as the raw tag so legs for systems without an
    adapter can still be described and reported as unsupported.
    `walking_time_minutes` is the stored walk that precedes this leg.
    """

    transit_system: str
    origin_stop_id: str
    destination_stop_id: str
    origin_stop_name: str = ""
    destination_stop_name: str = ""
    candidate_routes: tuple[CandidateRoute, ...] = ()
    walking_time_minutes: int | None = None

    @property
    def system(self) -> TransitSystem | None:
        return TransitSystem.parse(self.transit_system)

    def route(self, route_id: str) -> CandidateRoute | None:
        for route in self.candidate_routes:
            if route.route_id == route_id:
                return route
        return None
