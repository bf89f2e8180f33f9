from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ServiceAlert:
    alert_id: str
    header: str | None = None
    description: str | None = None
    route_ids: tuple[str, ...] = ()
