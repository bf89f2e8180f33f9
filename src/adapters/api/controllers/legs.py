from __future__ import annotations

from fastapi import APIRouter, Depends

from src.adapters.api.dependencies import get_leg_resolver_service
from src.adapters.api.schemas.legs import (
    CandidateTripSchema,
    ListTripsRequestSchema,
    ListTripsResponseSchema,
    ResolvedLegSchema,
    ResolveLegRequestSchema,
    to_epoch,
)
from src.app.services.leg_resolver_service import LegResolverService

router = APIRouter(prefix="/legs", tags=["legs"])

NO_TRIPS_MESSAGE = "No trips currently available. Service may have ended for the day."


@router.post("/trips", response_model=ListTripsResponseSchema)
async def list_available_trips(
    req: ListTripsRequestSchema,
    service: LegResolverService = Depends(get_leg_resolver_service),
) -> ListTripsResponseSchema:
    trips = await service.list_available_trips(
        req.leg.to_domain(), to_epoch(req.min_departure)
    )
    if not trips:
        return ListTripsResponseSchema(available=False, message=NO_TRIPS_MESSAGE)
    return ListTripsResponseSchema(
        available=True, trips=[CandidateTripSchema.from_domain(t) for t in trips]
    )


@router.post("/resolve", response_model=ResolvedLegSchema)
async def resolve_leg(
    req: ResolveLegRequestSchema,
    service: LegResolverService = Depends(get_leg_resolver_service),
) -> ResolvedLegSchema:
    detail = await service.resolve_leg(
        req.leg.to_domain(), to_epoch(req.min_departure), req.trip_key
    )
    return ResolvedLegSchema.from_domain(detail)
