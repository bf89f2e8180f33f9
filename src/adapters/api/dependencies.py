from __future__ import annotations

import os
from functools import lru_cache

from src.adapters.aws import AwsRuntimeConfig
from src.adapters.cache import TtlTripCache
from src.adapters.persistence import (
    DynamoDbReportRepository,
    InMemoryReportRepository,
    LocalStopDirectory,
)
from src.adapters.transit import (
    MtaBusAdapter,
    MtaSubwayAdapter,
    NjtBusAdapter,
    NjtRailAdapter,
    PathAdapter,
)
from src.adapters.transit.normalizers import default_normalizers
from src.app.ports.output import IReportRepository, ITransitSystemAdapter
from src.app.services.commute_service import CommuteService
from src.app.services.feasibility_service import FeasibilityService
from src.app.services.leg_resolver_service import LegResolverService
from src.app.services.walk_time_service import WalkTimeService
from src.domain.models import TransitSystem

# Adapters and caches live for the whole process so that tokens, feed
# snapshots and listed trips are shared across requests.


@lru_cache(maxsize=1)
def get_mta_subway_adapter() -> MtaSubwayAdapter:
    return MtaSubwayAdapter()


@lru_cache(maxsize=1)
def get_transit_adapters() -> dict[TransitSystem, ITransitSystemAdapter]:
    adapters: list[ITransitSystemAdapter] = [
        MtaBusAdapter(),
        get_mta_subway_adapter(),
        NjtBusAdapter(),
        NjtRailAdapter(),
        PathAdapter(),
    ]
    return {a.system: a for a in adapters}


@lru_cache(maxsize=1)
def get_trip_cache() -> TtlTripCache:
    return TtlTripCache()


@lru_cache(maxsize=1)
def get_stop_directory() -> LocalStopDirectory:
    # Loaded up front so request handlers never block on the CSV read.
    directory = LocalStopDirectory()
    directory.load()
    return directory


@lru_cache(maxsize=1)
def get_leg_resolver_service() -> LegResolverService:
    return LegResolverService(
        adapters=get_transit_adapters(),
        normalizers=default_normalizers(),
        trip_cache=get_trip_cache(),
        stop_directory=get_stop_directory(),
    )


def get_commute_service() -> CommuteService:
    service = CommuteService(resolver=get_leg_resolver_service())

    # Allow tuning via env without changing code.
    if os.getenv("DEFAULT_WALK_MINUTES"):
        service.default_walk_minutes = int(os.environ["DEFAULT_WALK_MINUTES"])
    return service


def get_feasibility_service() -> FeasibilityService:
    repository: IReportRepository = InMemoryReportRepository()
    if AwsRuntimeConfig.from_env().reports_in_dynamodb:
        repository = DynamoDbReportRepository()
    return FeasibilityService(report_repository=repository)


def get_walk_time_service() -> WalkTimeService:
    return WalkTimeService(stop_directory=get_stop_directory())
