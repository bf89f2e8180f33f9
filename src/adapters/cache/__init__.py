from .snapshot_cache import SnapshotCache
from .ttl_trip_cache import TtlTripCache

__all__ = ["SnapshotCache", "TtlTripCache"]
