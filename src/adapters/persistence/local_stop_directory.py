from __future__ import annotations

import csv
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from src.app.ports.output import IStopDirectory
from src.domain.models import GeoPoint, Stop

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LocalStopDirectory(IStopDirectory):
    """Stop names and coordinates from a GTFS-style stops.txt.

    Stop ids are expected already prefixed with their system (e.g.
    'NJTB_20883'), as produced by the offline stops export.

    Env vars:
      - STOPS_CSV_PATH: path to stops.txt (default: data/stops.txt)
    """

    path: str | Path | None = None

    _stops: dict[str, Stop] | None = field(default=None, init=False, repr=False)

    def _path(self) -> Path:
        return Path(self.path or os.getenv("STOPS_CSV_PATH") or "data/stops.txt")

    def _load(self) -> dict[str, Stop]:
        path = self._path()
        if not path.exists():
            logger.warning("Stop directory %s not found; names fall back to legs", path)
            return {}

        stops: dict[str, Stop] = {}
        with path.open("r", encoding="utf-8", newline="") as fp:
            reader = csv.DictReader(fp)
            for row in reader:
                stop_id = (row.get("stop_id") or "").strip()
                if not stop_id:
                    continue
                name = (row.get("stop_name") or stop_id).strip()
                location = GeoPoint.parse(row.get("stop_lat"), row.get("stop_lon"))
                stops[stop_id] = Stop(id=stop_id, name=name, location=location)
        return stops

    def load(self) -> int:
        """Read the stops file now; returns how many stops were loaded."""

        self._stops = self._load()
        return len(self._stops)

    def get_stop(self, stop_id: str) -> Stop | None:
        if self._stops is None:
            self._stops = self._load()
        return self._stops.get(stop_id)
