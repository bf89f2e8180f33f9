from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from src.app.ports.output import ITripCache
from src.domain.models import CachedMovement, RawMovement


@dataclass(slots=True)
class TtlTripCache(ITripCache):
    """Process-local trip cache with lazy expiry.

    Entries are only evicted when read past their TTL; `purge_expired` can be
    called to trim memory but is never needed for correctness.
    """

    clock: Callable[[], float] = time.monotonic

    _entries: dict[str, CachedMovement] = field(
        default_factory=dict, init=False, repr=False
    )
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def put(self, trip_key: str, movement: RawMovement, *, ttl_s: float) -> None:
        entry = CachedMovement(movement=movement, cached_at=self.clock(), ttl_s=ttl_s)
        async with self._lock:
            self._entries[trip_key] = entry

    async def get(self, trip_key: str) -> CachedMovement | None:
        async with self._lock:
            entry = self._entries.get(trip_key)
            if entry is None:
                return None
            if entry.is_expired(self.clock()):
                del self._entries[trip_key]
                return None
            return entry

    async def purge_expired(self) -> int:
        async with self._lock:
            now = self.clock()
            stale = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def __len__(self) -> int:
        return len(self._entries)
