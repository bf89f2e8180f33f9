from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.algorithms.timestamps import transit_timezone
from src.domain.models import (
    CandidateRoute,
    CandidateTrip,
    Leg,
    ResolvedLegDetail,
    ValidDirection,
)


def to_epoch(value: datetime | None) -> int | None:
    """Naive datetimes are read as transit local time."""

    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=transit_timezone())
    return int(value.timestamp())


def from_epoch(epoch: int | None) -> datetime | None:
    if epoch is None:
        return None
    return datetime.fromtimestamp(epoch, tz=transit_timezone())


class ValidDirectionSchema(BaseModel):
    direction_id: str = ""
    direction_name: str
    origin_stop_order: int | None = None
    destination_stop_order: int | None = None


class CandidateRouteSchema(BaseModel):
    route_id: str
    route_name: str = ""
    valid_directions: list[ValidDirectionSchema] = []


class LegSchema(BaseModel):
    transit_system: str
    origin_stop_id: str
    destination_stop_id: str
    origin_stop_name: str = ""
    destination_stop_name: str = ""
    candidate_routes: list[CandidateRouteSchema] = []
    walking_time_minutes: int | None = Field(default=None, ge=0)

    def to_domain(self) -> Leg:
        return Leg(
            transit_system=self.transit_system,
            origin_stop_id=self.origin_stop_id,
            destination_stop_id=self.destination_stop_id,
            origin_stop_name=self.origin_stop_name,
            destination_stop_name=self.destination_stop_name,
            candidate_routes=tuple(
                CandidateRoute(
                    route_id=r.route_id,
                    route_name=r.route_name or r.route_id,
                    valid_directions=tuple(
                        ValidDirection(
                            direction_id=d.direction_id,
                            direction_name=d.direction_name,
                            origin_stop_order=d.origin_stop_order,
                            destination_stop_order=d.destination_stop_order,
                        )
                        for d in r.valid_directions
                    ),
                )
                for r in self.candidate_routes
            ),
            walking_time_minutes=self.walking_time_minutes,
        )


class ListTripsRequestSchema(BaseModel):
    leg: LegSchema
    min_departure: datetime | None = None


class CandidateTripSchema(BaseModel):
    trip_key: str
    route_id: str
    route_name: str
    direction: str
    departure_epoch: int | None = None
    arrival_epoch: int | None = None
    departs_at: datetime | None = None
    arrives_at: datetime | None = None

    @staticmethod
    def from_domain(trip: CandidateTrip) -> "CandidateTripSchema":
        return CandidateTripSchema(
            trip_key=trip.trip_key,
            route_id=trip.route_id,
            route_name=trip.route_name,
            direction=trip.direction,
            departure_epoch=trip.origin_departure_epoch,
            arrival_epoch=trip.destination_arrival_epoch,
            departs_at=from_epoch(trip.origin_departure_epoch),
            arrives_at=from_epoch(trip.destination_arrival_epoch),
        )


class ListTripsResponseSchema(BaseModel):
    available: bool
    trips: list[CandidateTripSchema] = []
    message: str | None = None


class ResolveLegRequestSchema(BaseModel):
    leg: LegSchema
    min_departure: datetime | None = None
    trip_key: str | None = None


class ResolvedLegSchema(BaseModel):
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
    departs_at: datetime
    arrives_at: datetime
    duration_minutes: int

    @staticmethod
    def from_domain(detail: ResolvedLegDetail) -> "ResolvedLegSchema":
        return ResolvedLegSchema(
            trip_key=detail.trip_key,
            route_id=detail.route_id,
            route_name=detail.route_name,
            direction=detail.direction,
            origin_stop_id=detail.origin_stop_id,
            origin_stop_name=detail.origin_stop_name,
            destination_stop_id=detail.destination_stop_id,
            destination_stop_name=detail.destination_stop_name,
            departure_epoch=detail.departure_epoch,
            arrival_epoch=detail.arrival_epoch,
            departs_at=datetime.fromtimestamp(
                detail.departure_epoch, tz=transit_timezone()
            ),
            arrives_at=datetime.fromtimestamp(
                detail.arrival_epoch, tz=transit_timezone()
            ),
            duration_minutes=detail.duration_minutes,
        )
