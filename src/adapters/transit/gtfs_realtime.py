from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from google.transit import gtfs_realtime_pb2

from src.domain.algorithms.timestamps import safe_epoch_seconds
from src.domain.models import ServiceAlert


@dataclass(frozen=True, slots=True)
class FeedEntities:
    """A decoded GTFS-realtime envelope split by entity kind."""

    timestamp: int | None
    trip_updates: tuple[Any, ...] = ()
    vehicles: tuple[Any, ...] = ()
    alerts: tuple[Any, ...] = ()


def decode_feed(content: bytes) -> Any:
    """Parse a binary FeedMessage; raises `DecodeError` on garbage."""

    feed = gtfs_realtime_pb2.FeedMessage()
    feed.ParseFromString(content)
    return feed


def split_feed(feed: Any) -> FeedEntities:
    trip_updates: list[Any] = []
    vehicles: list[Any] = []
    alerts: list[Any] = []

    for ent in feed.entity:
        if ent.HasField("trip_update"):
            trip_updates.append(ent.trip_update)
        if ent.HasField("vehicle"):
            vehicles.append(ent.vehicle)
        if ent.HasField("alert"):
            alerts.append((ent.id, ent.alert))

    timestamp = None
    if feed.HasField("header") and feed.header.HasField("timestamp"):
        timestamp = safe_epoch_seconds(int(feed.header.timestamp))

    return FeedEntities(
        timestamp=timestamp,
        trip_updates=tuple(trip_updates),
        vehicles=tuple(vehicles),
        alerts=tuple(alerts),
    )


def stop_event_epoch(stop_time_update: Any, *fields: str) -> int | None:
    """First usable `arrival`/`departure` time, in the order given."""

    for name in fields:
        if not stop_time_update.HasField(name):
            continue
        event = getattr(stop_time_update, name)
        if not event.HasField("time"):
            continue
        epoch = safe_epoch_seconds(int(event.time))
        if epoch is not None:
            return epoch
    return None


def _translated(text: Any) -> str | None:
    for translation in text.translation:
        if translation.text:
            return translation.text
    return None


def alert_from_entity(alert_id: str, alert: Any) -> ServiceAlert:
    route_ids = tuple(
        dict.fromkeys(
            sel.route_id for sel in alert.informed_entity if sel.route_id
        )
    )
    return ServiceAlert(
        alert_id=alert_id,
        header=(
            _translated(alert.header_text) if alert.HasField("header_text") else None
        ),
        description=(
            _translated(alert.description_text)
            if alert.HasField("description_text")
            else None
        ),
        route_ids=route_ids,
    )
