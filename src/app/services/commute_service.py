from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from src.app.services.leg_resolver_service import LegResolverService
from src.domain.algorithms.timestamps import minutes_between
from src.domain.exceptions import InvalidInput, TransitError, UnsupportedSystem
from src.domain.models import (
    CommuteResult,
    CommuteTotals,
    Leg,
    LegOutcome,
    LegStatus,
    ResolvedLegDetail,
    WalkTimeEntry,
    WalkTimeSource,
)

logger = logging.getLogger(__name__)

DEFAULT_WALK_MINUTES = 5


def _outcome(
    index: int,
    leg: Leg,
    status: LegStatus,
    *,
    detail: ResolvedLegDetail | None = None,
    error: str | None = None,
) -> LegOutcome:
    return LegOutcome(
        leg_index=index,
        transit_system=leg.transit_system,
        origin_stop_id=leg.origin_stop_id,
        destination_stop_id=leg.destination_stop_id,
        status=status,
        detail=detail,
        error=error,
    )


def commute_totals(
    outcomes: Sequence[LegOutcome], walks: Sequence[WalkTimeEntry]
) -> CommuteTotals | None:
    """Totals over resolved legs and the walks between them."""

    resolved = [o for o in outcomes if o.ok and o.detail is not None]
    if not resolved:
        return None
    details = [o.detail for o in resolved if o.detail is not None]
    resolved_indexes = {o.leg_index for o in resolved}

    departure = details[0].departure_epoch
    arrival = details[-1].arrival_epoch
    return CommuteTotals(
        departure_epoch=departure,
        arrival_epoch=arrival,
        total_duration_minutes=minutes_between(departure, arrival),
        total_transit_minutes=sum(d.duration_minutes for d in details),
        total_walk_minutes=sum(
            w.minutes for w in walks if w.leg_index in resolved_indexes
        ),
    )


@dataclass(slots=True)
class CommuteService:
    """Chains legs, feeding each arrival plus walk into the next leg's floor.

    A leg that cannot be resolved stops the chain; legs before it are kept and
    legs after it are reported as dependent on it.
    """

    resolver: LegResolverService
    default_walk_minutes: int = DEFAULT_WALK_MINUTES
    clock: Callable[[], float] = time.time

    def walk_before(
        self, legs: Sequence[Leg], index: int, overrides: Mapping[int, int]
    ) -> WalkTimeEntry:
        """Walk preceding `legs[index]`: override, then stored, then default."""

        if index in overrides:
            return WalkTimeEntry(
                leg_index=index,
                minutes=int(overrides[index]),
                source=WalkTimeSource.CUSTOM,
            )
        stored = legs[index].walking_time_minutes
        if stored is not None:
            return WalkTimeEntry(
                leg_index=index, minutes=int(stored), source=WalkTimeSource.STORED
            )
        return WalkTimeEntry(
            leg_index=index,
            minutes=self.default_walk_minutes,
            source=WalkTimeSource.DEFAULT,
        )

    def _validate(
        self,
        legs: Sequence[Leg],
        beginning_leg_index: int,
        selected_trip_keys: Sequence[str | None],
        walk_time_overrides: Mapping[int, int],
    ) -> None:
        if not legs:
            raise InvalidInput("Commute has no legs")
        if not 0 <= beginning_leg_index < len(legs):
            raise InvalidInput(
                f"beginning_leg_index {beginning_leg_index} is outside "
                f"0..{len(legs) - 1}"
            )
        if len(selected_trip_keys) > len(legs):
            raise InvalidInput("More selected trips than legs")
        for index, minutes in walk_time_overrides.items():
            if not 0 <= index < len(legs):
                raise InvalidInput(f"Walk time override for unknown leg {index}")
            if minutes < 0:
                raise InvalidInput(f"Walk time for leg {index} cannot be negative")

        for index in range(beginning_leg_index, len(legs)):
            leg = legs[index]
            if not self.resolver.supports(leg.transit_system):
                # Unsupported legs are reported, not rejected.
                continue
            key = selected_trip_keys[index] if index < len(selected_trip_keys) else None
            self.resolver.validate(leg, key)

    async def calculate_commute(
        self,
        legs: Sequence[Leg],
        *,
        beginning_leg_index: int = 0,
        min_departure: int | None = None,
        selected_trip_keys: Sequence[str | None] = (),
        walk_time_overrides: Mapping[int, int] | None = None,
    ) -> CommuteResult:
        """Resolve `legs[beginning_leg_index:]` strictly in order.

        `selected_trip_keys` and `walk_time_overrides` are indexed by absolute
        leg position; an override applies to the walk before that leg.
        """

        overrides = dict(walk_time_overrides or {})
        self._validate(legs, beginning_leg_index, selected_trip_keys, overrides)

        current_min = int(min_departure if min_departure is not None else self.clock())
        outcomes: list[LegOutcome] = []
        walks: list[WalkTimeEntry] = []

        for index in range(beginning_leg_index, len(legs)):
            leg = legs[index]
            key = selected_trip_keys[index] if index < len(selected_trip_keys) else None

            try:
                if not self.resolver.supports(leg.transit_system):
                    raise UnsupportedSystem(leg.transit_system)
                detail = await self.resolver.resolve_leg(leg, current_min, key)
            except UnsupportedSystem as exc:
                logger.info("Leg %d unsupported: %s", index, exc)
                outcomes.append(
                    _outcome(index, leg, LegStatus.UNSUPPORTED, error=str(exc))
                )
                outcomes.extend(
                    _outcome(
                        j,
                        legs[j],
                        LegStatus.DEPENDENCY_ERROR,
                        error="Dependent on unsupported leg",
                    )
                    for j in range(index + 1, len(legs))
                )
                totals = commute_totals(outcomes, walks)
                return CommuteResult(
                    success=totals is not None,
                    beginning_leg_index=beginning_leg_index,
                    legs=tuple(outcomes),
                    walk_times=tuple(walks),
                    totals=totals,
                    error=str(exc),
                    error_leg_index=index,
                )
            except TransitError as exc:
                logger.info("Leg %d unavailable: %s", index, exc)
                outcomes.append(
                    _outcome(index, leg, LegStatus.UNAVAILABLE, error=str(exc))
                )
                outcomes.extend(
                    _outcome(
                        j,
                        legs[j],
                        LegStatus.DEPENDENCY_ERROR,
                        error="Previous leg unavailable",
                    )
                    for j in range(index + 1, len(legs))
                )
                return CommuteResult(
                    success=False,
                    beginning_leg_index=beginning_leg_index,
                    legs=tuple(outcomes),
                    walk_times=tuple(walks),
                    error=str(exc),
                    error_leg_index=index,
                )

            outcomes.append(_outcome(index, leg, LegStatus.RESOLVED, detail=detail))
            if index + 1 < len(legs):
                walk = self.walk_before(legs, index + 1, overrides)
                walks.append(walk)
                current_min = detail.arrival_epoch + walk.minutes * 60

        totals = commute_totals(outcomes, walks)
        return CommuteResult(
            success=totals is not None,
            beginning_leg_index=beginning_leg_index,
            legs=tuple(outcomes),
            walk_times=tuple(walks),
            totals=totals,
        )
