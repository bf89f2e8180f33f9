from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CandidateTrip:
    trip_key: str
    route_id: str
    route_name: str
    direction: str
    origin_departure_epoch: int | None
    destination_arrival_epoch: int | None = None

    def __post_init__(self) -> None:
        if (
            self.origin_departure_epoch is not None
            and self.destination_arrival_epoch is not None
            and self.destination_arrival_epoch <= self.origin_departure_epoch
        ):
            raise ValueError(
                f"Trip {self.trip_key} arrives at or before it departs "
                f"({self.destination_arrival_epoch} <= {self.origin_departure_epoch})"
            )


@dataclass(frozen=True, slots=True)
class LegTiming:
    """Origin/destination times read from one raw movement."""

    departure_epoch: int
    arrival_epoch: int | None
    direction: str | None = None
    origin_stop_name: str | None = None
    destination_stop_name: str | None = None


@dataclass(frozen=True, slots=True)
class ResolvedLegDetail:
    trip_key: str
    route_id: str
    route_name: str
    direction: str
    origin_stop_id: str
    origin_stop_name: str
    destination_stop_id: str
    destination_stop_name: str
    departure_epoch: int
    arrival_epoch: int
    duration_minutes: int
