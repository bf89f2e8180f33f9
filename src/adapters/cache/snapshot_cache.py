from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class SnapshotCache(Generic[T]):
    """Shares one upstream fetch per key for a few seconds.

    Used for whole-feed or whole-station payloads so that fanning out over
    several routes does not hit the same endpoint once per route.
    """

    ttl_s: float = 15.0
    clock: Callable[[], float] = time.monotonic

    _values: dict[str, tuple[float, T]] = field(
        default_factory=dict, init=False, repr=False
    )
    _locks: dict[str, asyncio.Lock] = field(
        default_factory=dict, init=False, repr=False
    )

    async def get_or_load(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            hit = self._values.get(key)
            if hit is not None and (self.clock() - hit[0]) < self.ttl_s:
                return hit[1]

            value = await loader()
            self._values[key] = (self.clock(), value)
            return value

    def clear(self) -> None:
        self._values.clear()
