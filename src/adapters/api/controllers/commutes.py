from __future__ import annotations

from fastapi import APIRouter, Depends

from src.adapters.api.dependencies import get_commute_service
from src.adapters.api.schemas.commutes import (
    CalculateCommuteRequestSchema,
    CommuteResultSchema,
)
from src.adapters.api.schemas.legs import to_epoch
from src.app.services.commute_service import CommuteService

router = APIRouter(prefix="/commutes", tags=["commutes"])


@router.post("/calculate", response_model=CommuteResultSchema)
async def calculate_commute(
    req: CalculateCommuteRequestSchema,
    service: CommuteService = Depends(get_commute_service),
) -> CommuteResultSchema:
    result = await service.calculate_commute(
        [leg.to_domain() for leg in req.legs],
        beginning_leg_index=req.beginning_leg_index,
        min_departure=to_epoch(req.min_departure),
        selected_trip_keys=req.selected_trip_keys,
        walk_time_overrides=req.walk_time_override_map(),
    )
    return CommuteResultSchema.from_domain(result)
