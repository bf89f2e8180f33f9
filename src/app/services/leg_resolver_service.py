from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from src.app.ports.output import (
    IStopDirectory,
    ITransitSystemAdapter,
    ITripCache,
    ITripNormalizer,
)
from src.domain.algorithms.timestamps import format_local_time, minutes_between
from src.domain.algorithms.trip_keys import parse_trip_key
from src.domain.algorithms.trip_ordering import order_candidates
from src.domain.exceptions import (
    InvalidInput,
    NotFound,
    SourceUnavailable,
    UnsupportedSystem,
)
from src.domain.models import (
    CandidateRoute,
    CandidateTrip,
    Leg,
    RawMovement,
    ResolvedLegDetail,
    TransitSystem,
)

logger = logging.getLogger(__name__)

# Raised by normalizers reading a payload whose shape the source changed.
MALFORMED_RECORD_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


def validate_leg(leg: Leg) -> None:
    """Reject malformed leg descriptors before any I/O."""

    if not (leg.transit_system or "").strip():
        raise InvalidInput("Leg is missing its transit system")
    if not leg.origin_stop_id or not leg.destination_stop_id:
        raise InvalidInput("Leg needs both an origin and a destination stop")
    if leg.origin_stop_id == leg.destination_stop_id:
        raise InvalidInput(
            f"Leg origin and destination are the same stop ({leg.origin_stop_id})"
        )
    if not leg.candidate_routes:
        raise InvalidInput(
            f"Leg {leg.origin_stop_id} -> {leg.destination_stop_id} "
            "has no candidate routes"
        )
    for route in leg.candidate_routes:
        if not route.route_id:
            raise InvalidInput("Candidate route is missing its route id")


@dataclass(slots=True)
class LegResolverService:
    """Finds catchable trips for one leg and resolves a chosen trip's times.

    Every movement that survives a listing scan is cached under its trip key
    so that sources without a by-id lookup can still be resolved later.
    """

    adapters: Mapping[TransitSystem, ITransitSystemAdapter]
    normalizers: Mapping[TransitSystem, ITripNormalizer]
    trip_cache: ITripCache
    stop_directory: IStopDirectory | None = None
    clock: Callable[[], float] = time.time

    def supports(self, transit_system: str) -> bool:
        """Whether legs on this system can be resolved to a timed trip."""

        system = TransitSystem.parse(transit_system)
        if system is None or system not in self.adapters:
            return False
        normalizer = self.normalizers.get(system)
        return normalizer is not None and normalizer.supports_resolution

    def validate(self, leg: Leg, trip_key: str | None = None) -> None:
        validate_leg(leg)
        if trip_key is None:
            return
        parts = parse_trip_key(trip_key)
        if parts is None:
            raise InvalidInput(f"Malformed trip key: {trip_key}")
        if leg.system is not None and parts.system != leg.system:
            raise InvalidInput(
                f"Trip key {trip_key} does not belong to {leg.transit_system}"
            )

    def _wiring(
        self, leg: Leg
    ) -> tuple[TransitSystem, ITransitSystemAdapter, ITripNormalizer]:
        system = leg.system
        if (
            system is None
            or system not in self.adapters
            or system not in self.normalizers
        ):
            raise UnsupportedSystem(leg.transit_system)
        return system, self.adapters[system], self.normalizers[system]

    async def _scan_route(
        self,
        *,
        leg: Leg,
        route: CandidateRoute,
        adapter: ITransitSystemAdapter,
        normalizer: ITripNormalizer,
        min_departure: int,
    ) -> list[CandidateTrip]:
        movements = await adapter.list_movements(leg=leg, route=route)
        now = int(self.clock())

        kept: list[CandidateTrip] = []
        for movement in movements:
            try:
                trip = normalizer.to_candidate(
                    movement, leg=leg, route=route, now_epoch=now
                )
            except MALFORMED_RECORD_ERRORS as exc:
                logger.warning(
                    "Skipping malformed %s movement on route %s: %r",
                    adapter.system.value,
                    route.route_id,
                    exc,
                )
                continue
            if trip is None or trip.origin_departure_epoch is None:
                continue
            if trip.origin_departure_epoch < min_departure:
                continue
            await self.trip_cache.put(
                trip.trip_key, movement, ttl_s=adapter.cache_ttl_s
            )
            kept.append(trip)

        logger.debug(
            "Route %s at %s: kept %d of %d movements",
            route.route_id,
            leg.origin_stop_id,
            len(kept),
            len(movements),
        )
        return kept

    async def list_available_trips(
        self, leg: Leg, min_departure: int | None = None
    ) -> tuple[CandidateTrip, ...]:
        """Trips on the leg's candidate routes departing at or after the floor.

        A route whose source fails is logged and left out; the call only fails
        when every route failed.
        """

        self.validate(leg)
        system, adapter, normalizer = self._wiring(leg)
        floor = int(min_departure if min_departure is not None else self.clock())

        routes = leg.candidate_routes
        results = await asyncio.gather(
            *(
                self._scan_route(
                    leg=leg,
                    route=route,
                    adapter=adapter,
                    normalizer=normalizer,
                    min_departure=floor,
                )
                for route in routes
            ),
            return_exceptions=True,
        )

        trips: list[CandidateTrip] = []
        failures: list[SourceUnavailable] = []
        for route, result in zip(routes, results):
            if isinstance(result, Exception) and not isinstance(
                result, SourceUnavailable
            ):
                logger.error(
                    "Route %s scan crashed", route.route_id, exc_info=result
                )
                result = SourceUnavailable(
                    system.value, f"route {route.route_id} failed: {result!r}"
                )
            if isinstance(result, SourceUnavailable):
                logger.warning(
                    "Excluding %s route %s: %s", system.value, route.route_id, result
                )
                failures.append(result)
                continue
            if isinstance(result, BaseException):
                raise result
            trips.extend(result)

        if failures and len(failures) == len(routes):
            if len(failures) == 1:
                raise failures[0]
            raise SourceUnavailable(
                system.value, f"all {len(routes)} candidate routes failed"
            )

        return order_candidates(trips)

    async def _movement_for(
        self,
        *,
        trip_key: str,
        leg: Leg,
        adapter: ITransitSystemAdapter,
        normalizer: ITripNormalizer,
    ) -> RawMovement:
        parts = parse_trip_key(trip_key)
        if parts is None:
            raise InvalidInput(f"Malformed trip key: {trip_key}")

        cached = await self.trip_cache.get(trip_key)
        if cached is not None and normalizer.has_stop_detail(cached.movement):
            return cached.movement

        if adapter.supports_trip_lookup and not parts.is_minted:
            try:
                movement = await adapter.fetch_movement(
                    trip_ref=parts.raw_id, leg=leg, cached=cached
                )
            except MALFORMED_RECORD_ERRORS as exc:
                raise SourceUnavailable(
                    adapter.system.value, f"malformed trip {parts.raw_id}: {exc!r}"
                ) from exc
            await self.trip_cache.put(trip_key, movement, ttl_s=adapter.cache_ttl_s)
            return movement

        raise NotFound(
            f"Trip {trip_key} is no longer available; "
            "refresh the trip list and try again"
        )

    def _stop_name(
        self, stop_id: str, from_source: str | None, from_leg: str | None
    ) -> str:
        if from_source:
            return from_source
        if self.stop_directory is not None:
            stop = self.stop_directory.get_stop(stop_id)
            if stop is not None and stop.name:
                return stop.name
        return from_leg or stop_id

    async def resolve_leg(
        self,
        leg: Leg,
        min_departure: int | None = None,
        trip_key: str | None = None,
    ) -> ResolvedLegDetail:
        """Full departure/arrival detail for a chosen trip, or the earliest one."""

        self.validate(leg, trip_key)
        system, adapter, normalizer = self._wiring(leg)
        if not normalizer.supports_resolution:
            raise UnsupportedSystem(
                system.value, f"Live trip detail unavailable for {system.value}"
            )
        floor = int(min_departure if min_departure is not None else self.clock())

        route: CandidateRoute | None = None
        direction = ""
        if trip_key is None:
            trips = await self.list_available_trips(leg, floor)
            if not trips:
                raise NotFound(
                    f"No trips available for leg from "
                    f"{leg.origin_stop_name or leg.origin_stop_id} to "
                    f"{leg.destination_stop_name or leg.destination_stop_id} "
                    f"after {format_local_time(floor)}"
                )
            earliest = trips[0]
            trip_key = earliest.trip_key
            route = leg.route(earliest.route_id)
            direction = earliest.direction

        parts = parse_trip_key(trip_key)
        if parts is None:
            raise InvalidInput(f"Malformed trip key: {trip_key}")
        if route is None:
            route = leg.route(parts.route_id)

        movement = await self._movement_for(
            trip_key=trip_key, leg=leg, adapter=adapter, normalizer=normalizer
        )
        if route is None and movement.route_id:
            route = leg.route(movement.route_id)
        try:
            timing = normalizer.to_timing(movement, leg=leg, route=route)
        except MALFORMED_RECORD_ERRORS as exc:
            raise SourceUnavailable(
                system.value, f"malformed record for trip {trip_key}: {exc!r}"
            ) from exc

        arrival = timing.arrival_epoch
        if arrival is None or arrival <= timing.departure_epoch:
            raise NotFound(
                f"No arrival time at "
                f"{leg.destination_stop_name or leg.destination_stop_id} "
                f"for trip {trip_key}"
            )
        if timing.departure_epoch < floor:
            raise NotFound(
                f"Trip {trip_key} departs "
                f"{leg.origin_stop_name or leg.origin_stop_id} at "
                f"{format_local_time(timing.departure_epoch)}, "
                f"before {format_local_time(floor)}"
            )

        return ResolvedLegDetail(
            trip_key=trip_key,
            route_id=route.route_id if route else parts.route_id,
            route_name=route.route_name if route else parts.route_id,
            direction=timing.direction or direction,
            origin_stop_id=leg.origin_stop_id,
            origin_stop_name=self._stop_name(
                leg.origin_stop_id, timing.origin_stop_name, leg.origin_stop_name
            ),
            destination_stop_id=leg.destination_stop_id,
            destination_stop_name=self._stop_name(
                leg.destination_stop_id,
                timing.destination_stop_name,
                leg.destination_stop_name,
            ),
            departure_epoch=timing.departure_epoch,
            arrival_epoch=arrival,
            duration_minutes=minutes_between(timing.departure_epoch, arrival),
        )
