from __future__ import annotations

from collections.abc import Iterable

from src.domain.models import CandidateTrip


def _sort_key(trip: CandidateTrip) -> tuple[int, int, str]:
    dep = trip.origin_departure_epoch
    if dep is None:
        return (1, 0, trip.trip_key)
    return (0, dep, trip.trip_key)


def order_candidates(trips: Iterable[CandidateTrip]) -> tuple[CandidateTrip, ...]:
    """Sort ascending by departure (missing times last), first key wins."""

    seen: set[str] = set()
    out: list[CandidateTrip] = []
    for trip in sorted(trips, key=_sort_key):
        if trip.trip_key in seen:
            continue
        seen.add(trip.trip_key)
        out.append(trip)
    return tuple(out)
