from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from src.adapters.api.dependencies import (
    get_feasibility_service,
    get_walk_time_service,
)
from src.adapters.api.schemas.feasibility import (
    FeasibilityRequestSchema,
    FeasibilityScoreSchema,
    WalkTimeSchema,
)
from src.app.services.feasibility_service import FeasibilityService
from src.app.services.walk_time_service import WalkTimeService

router = APIRouter(tags=["feasibility"])


@router.post("/feasibility", response_model=FeasibilityScoreSchema)
def score_feasibility(
    req: FeasibilityRequestSchema,
    service: FeasibilityService = Depends(get_feasibility_service),
) -> FeasibilityScoreSchema:
    result = service.score(req.stop_ids)
    return FeasibilityScoreSchema(
        score=result.score,
        level=result.level.value,
        message=result.message,
        report_count=result.report_count,
    )


@router.get("/walk-time", response_model=WalkTimeSchema)
def walk_time(
    from_stop_id: str = Query(..., alias="from"),
    to_stop_id: str = Query(..., alias="to"),
    service: WalkTimeService = Depends(get_walk_time_service),
) -> WalkTimeSchema:
    estimate = service.estimate(from_stop_id, to_stop_id)
    return WalkTimeSchema(
        from_stop_id=from_stop_id,
        to_stop_id=to_stop_id,
        minutes=estimate.minutes,
        estimated=estimate.estimated,
        distance_m=estimate.distance_m,
    )
