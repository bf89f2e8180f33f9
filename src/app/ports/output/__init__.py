from .report_repository import IReportRepository
from .stop_directory import IStopDirectory
from .transit_system_adapter import ITransitSystemAdapter
from .trip_cache import ITripCache
from .trip_normalizer import ITripNormalizer

__all__ = [
    "IReportRepository",
    "IStopDirectory",
    "ITransitSystemAdapter",
    "ITripCache",
    "ITripNormalizer",
]
