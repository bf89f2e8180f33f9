from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from src.adapters.api.dependencies import get_mta_subway_adapter
from src.adapters.api.schemas.systems import (
    ServiceAlertSchema,
    ServiceAlertsResponseSchema,
)
from src.adapters.transit.mta_subway_adapter import MtaSubwayAdapter

router = APIRouter(prefix="/systems", tags=["systems"])


@router.get("/MTA_SUBWAY/alerts", response_model=ServiceAlertsResponseSchema)
async def list_subway_alerts(
    group: str | None = Query(default=None),
    adapter: MtaSubwayAdapter = Depends(get_mta_subway_adapter),
) -> ServiceAlertsResponseSchema:
    alerts = await adapter.list_alerts(group)
    return ServiceAlertsResponseSchema(
        fetched_at=datetime.now(timezone.utc),
        alerts=[
            ServiceAlertSchema(
                alert_id=a.alert_id,
                header=a.header,
                description=a.description,
                route_ids=list(a.route_ids),
            )
            for a in alerts
        ],
    )
