from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class Stop:
    """A directory entry for a system-prefixed stop id (e.g. 'NJTR_NY')."""

    id: str
    name: str
    location: GeoPoint | None = None
