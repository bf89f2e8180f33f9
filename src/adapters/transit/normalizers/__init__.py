from src.domain.models import TransitSystem

from .base import TripNormalizer
from .mta_bus import MtaBusNormalizer
from .mta_subway import MtaSubwayNormalizer
from .njt_bus import NjtBusNormalizer
from .njt_rail import NjtRailNormalizer
from .path import PathNormalizer


def default_normalizers() -> dict[TransitSystem, TripNormalizer]:
    normalizers: list[TripNormalizer] = [
        MtaBusNormalizer(),
        MtaSubwayNormalizer(),
        NjtBusNormalizer(),
        NjtRailNormalizer(),
        PathNormalizer(),
    ]
    return {n.system: n for n in normalizers}


__all__ = [
    "MtaBusNormalizer",
    "MtaSubwayNormalizer",
    "NjtBusNormalizer",
    "NjtRailNormalizer",
    "PathNormalizer",
    "TripNormalizer",
    "default_normalizers",
]
