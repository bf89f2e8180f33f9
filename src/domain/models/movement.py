from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .transit import TransitSystem


@dataclass(frozen=True, slots=True)
class RawMovement:
    """A source-shaped record as returned by one system adapter.

    `payload` is whatever the source produced: a decoded protobuf TripUpdate
    for feed systems, a JSON object for REST systems.
    """

    system: TransitSystem
    payload: Any
    route_id: str | None = None
    feed_group: str | None = None
    has_stop_detail: bool = True


@dataclass(frozen=True, slots=True)
class CachedMovement:
    movement: RawMovement
    cached_at: float
    ttl_s: float

    @property
    def feed_group(self) -> str | None:
        return self.movement.feed_group

    def is_expired(self, now: float) -> bool:
        return (now - self.cached_at) > self.ttl_s
