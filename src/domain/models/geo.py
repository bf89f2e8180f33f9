from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GeoPoint:
    lat: float
    lon: float

    def __post_init__(self) -> None:
        if not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")

    @classmethod
    def parse(cls, lat: str | None, lon: str | None) -> "GeoPoint | None":
        """Coordinates from text columns; None when blank or out of range."""

        if not (lat or "").strip() or not (lon or "").strip():
            return None
        try:
            return cls(lat=float(lat), lon=float(lon))  # type: ignore[arg-type]
        except ValueError:
            return None
