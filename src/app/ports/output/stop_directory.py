from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import Stop


class IStopDirectory(ABC):
    """Port for stop name/location lookups."""

    @abstractmethod
    def get_stop(self, stop_id: str) -> Stop | None:
        raise NotImplementedError
