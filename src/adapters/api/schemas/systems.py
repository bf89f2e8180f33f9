from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ServiceAlertSchema(BaseModel):
    alert_id: str
    header: str | None = None
    description: str | None = None
    route_ids: list[str] = []


class ServiceAlertsResponseSchema(BaseModel):
    fetched_at: datetime
    alerts: list[ServiceAlertSchema]
