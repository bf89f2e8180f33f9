from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.adapters.api.schemas.legs import LegSchema, ResolvedLegSchema, from_epoch
from src.domain.models import CommuteResult


class CalculateCommuteRequestSchema(BaseModel):
    legs: list[LegSchema] = Field(..., min_length=1)
    beginning_leg_index: int = Field(default=0, ge=0)
    min_departure: datetime | None = None
    # Indexed by leg position; null means "pick the earliest".
    selected_trip_keys: list[str | None] = []
    # Position of the leg the walk leads to, as a per-leg list with nulls
    # or as a mapping.
    walk_time_overrides: list[int | None] | dict[int, int] = {}

    def walk_time_override_map(self) -> dict[int, int]:
        if isinstance(self.walk_time_overrides, dict):
            return dict(self.walk_time_overrides)
        return {
            index: minutes
            for index, minutes in enumerate(self.walk_time_overrides)
            if minutes is not None
        }


class LegOutcomeSchema(BaseModel):
    leg_index: int
    transit_system: str
    origin_stop_id: str
    destination_stop_id: str
    status: str
    detail: ResolvedLegSchema | None = None
    error: str | None = None


class WalkTimeEntrySchema(BaseModel):
    leg_index: int
    minutes: int
    source: str


class CommuteTotalsSchema(BaseModel):
    departure_epoch: int
    arrival_epoch: int
    departs_at: datetime | None = None
    arrives_at: datetime | None = None
    total_duration_minutes: int
    total_transit_minutes: int
    total_walk_minutes: int


class CommuteResultSchema(BaseModel):
    success: bool
    beginning_leg_index: int
    legs: list[LegOutcomeSchema]
    walk_times: list[WalkTimeEntrySchema] = []
    totals: CommuteTotalsSchema | None = None
    error: str | None = None
    error_leg_index: int | None = None

    @staticmethod
    def from_domain(result: CommuteResult) -> "CommuteResultSchema":
        totals = None
        if result.totals is not None:
            t = result.totals
            totals = CommuteTotalsSchema(
                departure_epoch=t.departure_epoch,
                arrival_epoch=t.arrival_epoch,
                departs_at=from_epoch(t.departure_epoch),
                arrives_at=from_epoch(t.arrival_epoch),
                total_duration_minutes=t.total_duration_minutes,
                total_transit_minutes=t.total_transit_minutes,
                total_walk_minutes=t.total_walk_minutes,
            )
        return CommuteResultSchema(
            success=result.success,
            beginning_leg_index=result.beginning_leg_index,
            legs=[
                LegOutcomeSchema(
                    leg_index=o.leg_index,
                    transit_system=o.transit_system,
                    origin_stop_id=o.origin_stop_id,
                    destination_stop_id=o.destination_stop_id,
                    status=o.status.value,
                    detail=(
                        ResolvedLegSchema.from_domain(o.detail) if o.detail else None
                    ),
                    error=o.error,
                )
                for o in result.legs
            ],
            walk_times=[
                WalkTimeEntrySchema(
                    leg_index=w.leg_index, minutes=w.minutes, source=w.source.value
                )
                for w in result.walk_times
            ],
            totals=totals,
            error=result.error,
            error_leg_index=result.error_leg_index,
        )
