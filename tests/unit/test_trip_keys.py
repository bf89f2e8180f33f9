from __future__ import annotations

from src.domain.algorithms.trip_keys import (
    make_trip_key,
    mint_trip_key,
    parse_trip_key,
)
from src.domain.models import TransitSystem


def test_source_id_key_is_parsed_back() -> None:
    key = make_trip_key(
        TransitSystem.MTA_SUBWAY,
        route_id="1",
        service_date="20240529",
        raw_id="036000_1..S03R",
    )

    assert key == "MTA_SUBWAY:1:20240529:036000_1..S03R"
    parts = parse_trip_key(key)
    assert parts is not None
    assert parts.system == TransitSystem.MTA_SUBWAY
    assert parts.route_id == "1"
    assert parts.raw_id == "036000_1..S03R"
    assert not parts.is_minted


def test_minted_key_buckets_by_minute_and_is_flagged() -> None:
    a = mint_trip_key(
        TransitSystem.PATH,
        route_id="JSQ_33",
        service_date="20240529",
        departure_epoch=1717000000,
    )
    b = mint_trip_key(
        TransitSystem.PATH,
        route_id="JSQ_33",
        service_date="20240529",
        departure_epoch=1717000010,
    )

    assert a == b
    parts = parse_trip_key(a)
    assert parts is not None and parts.is_minted


def test_route_ids_with_colons_and_raw_ids_with_colons_survive() -> None:
    key = make_trip_key(
        TransitSystem.MTA_BUS,
        route_id="MTA NYCT:B63",
        service_date="20240529",
        raw_id="a:b:c",
    )
    parts = parse_trip_key(key)

    assert parts is not None
    assert parts.route_id == "MTA NYCT:B63"
    assert parts.raw_id == "a:b:c"


def test_malformed_keys_are_rejected() -> None:
    assert parse_trip_key("") is None
    assert parse_trip_key("MTA_SUBWAY:1:20240529") is None
    assert parse_trip_key("FERRY:1:20240529:x") is None
    assert parse_trip_key("MTA_SUBWAY:1:20240529:") is None
