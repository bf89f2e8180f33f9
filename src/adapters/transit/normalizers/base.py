from __future__ import annotations

from typing import ClassVar

from src.app.ports.output import ITripNormalizer
from src.domain.algorithms.timestamps import service_date
from src.domain.algorithms.trip_keys import make_trip_key, mint_trip_key
from src.domain.models import CandidateTrip, TransitSystem


class TripNormalizer(ITripNormalizer):
    system: ClassVar[TransitSystem]

    def trip_key(
        self,
        *,
        route_id: str,
        raw_id: str | None,
        departure_epoch: int,
        service_day: str | None = None,
    ) -> str:
        """Source id based key when there is one, minted from the minute otherwise."""

        day = service_day or service_date(departure_epoch)
        if raw_id:
            return make_trip_key(
                self.system, route_id=route_id, service_date=day, raw_id=str(raw_id)
            )
        return mint_trip_key(
            self.system,
            route_id=route_id,
            service_date=day,
            departure_epoch=departure_epoch,
        )


def build_candidate(
    *,
    trip_key: str,
    route_id: str,
    route_name: str,
    direction: str,
    departure_epoch: int | None,
    arrival_epoch: int | None,
) -> CandidateTrip | None:
    if departure_epoch is None:
        return None
    if arrival_epoch is not None and arrival_epoch <= departure_epoch:
        return None
    return CandidateTrip(
        trip_key=trip_key,
        route_id=route_id,
        route_name=route_name,
        direction=direction,
        origin_departure_epoch=departure_epoch,
        destination_arrival_epoch=arrival_epoch,
    )


def stop_order(
    codes: list[str], origin: str, destination: str
) -> tuple[int, int] | None:
    """Indexes of origin and the first destination after it, if any."""

    try:
        o = codes.index(origin)
    except ValueError:
        return None
    for d in range(o + 1, len(codes)):
        if codes[d] == destination:
            return o, d
    return None
