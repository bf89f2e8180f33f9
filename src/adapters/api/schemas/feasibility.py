from __future__ import annotations

from pydantic import BaseModel, Field


class FeasibilityRequestSchema(BaseModel):
    stop_ids: list[str] = Field(..., min_length=1)


class FeasibilityScoreSchema(BaseModel):
    score: int
    level: str
    message: str
    report_count: int = 0


class WalkTimeSchema(BaseModel):
    from_stop_id: str
    to_stop_id: str
    minutes: int
    estimated: bool
    distance_m: float | None = None
