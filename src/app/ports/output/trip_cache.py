from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import CachedMovement, RawMovement


class ITripCache(ABC):
    """Short-lived trip_key -> raw movement store."""

    @abstractmethod
    async def put(self, trip_key: str, movement: RawMovement, *, ttl_s: float) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get(self, trip_key: str) -> CachedMovement | None:
        """Return the entry, or None when absent or older than its TTL."""

        raise NotImplementedError
