from __future__ import annotations

import math
import os
import re
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any
from zoneinfo import ZoneInfo

# 2000-01-01T00:00:00Z and 2100-01-01T00:00:00Z.
MIN_VALID_EPOCH = 946684800
MAX_VALID_EPOCH = 4102444800

NJT_BUS_TIME_FORMAT = "%m/%d/%Y %I:%M:%S %p"
NJT_RAIL_TIME_FORMAT = "%d-%b-%Y %I:%M:%S %p"

_RELATIVE_MINUTES = re.compile(r"^in\s+(\d+)\s+min", re.IGNORECASE)
_CLOCK_TIME = re.compile(r"^(\d{1,2}):(\d{2})\s*([AP]M)$", re.IGNORECASE)


def transit_timezone() -> ZoneInfo:
    return ZoneInfo(os.getenv("TRANSIT_TIMEZONE") or "America/New_York")


def _in_range(seconds: int) -> int | None:
    if MIN_VALID_EPOCH <= seconds <= MAX_VALID_EPOCH:
        return seconds
    return None


def combine_split_int64(high: int, low: int) -> int:
    """Rebuild a 64-bit value from its two 32-bit halves.

    `high` is the signed significant word; `low` is read as unsigned.
    """

    return int(high) * (1 << 32) + (int(low) & 0xFFFFFFFF)


def safe_epoch_seconds(value: Any) -> int | None:
    """Coerce a feed timestamp to epoch seconds, or None if it is unusable.

    Accepts plain ints, numeric strings, `(high, low)` pairs and
    `{"high": ..., "low": ...}` mappings. Anything outside 2000..2100 is
    rejected instead of propagated.
    """

    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Mapping):
        high = value.get("high")
        low = value.get("low")
        if not isinstance(high, int) or not isinstance(low, int):
            return None
        return _in_range(combine_split_int64(high, low))

    if isinstance(value, tuple):
        if len(value) != 2 or not all(isinstance(v, int) for v in value):
            return None
        return _in_range(combine_split_int64(value[0], value[1]))

    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            value = int(raw)
        except ValueError:
            return None

    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = int(value)

    if isinstance(value, int):
        return _in_range(value)
    return None


def parse_iso_epoch(raw: Any) -> int | None:
    """Parse an ISO-8601 timestamp; naive values are read as transit local time."""

    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=transit_timezone())
    return _in_range(int(dt.timestamp()))


def parse_local_epoch(raw: Any, fmt: str) -> int | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        dt = datetime.strptime(raw.strip(), fmt)
    except ValueError:
        return None
    return _in_range(int(dt.replace(tzinfo=transit_timezone()).timestamp()))


def clock_time_epoch(raw: Any, *, reference_epoch: int) -> int | None:
    """Resolve a display time such as '7:30 AM' or 'in 18 mins'.

    Clock times are placed on the local day of `reference_epoch`.
    """

    if not isinstance(raw, str) or not raw.strip():
        return None
    text = raw.strip()

    relative = _RELATIVE_MINUTES.match(text)
    if relative:
        return reference_epoch + int(relative.group(1)) * 60

    clock = _CLOCK_TIME.match(text)
    if not clock:
        return None
    hour = int(clock.group(1)) % 12
    if clock.group(3).upper() == "PM":
        hour += 12
    minute = int(clock.group(2))
    if minute > 59:
        return None

    day = datetime.fromtimestamp(reference_epoch, tz=transit_timezone())
    dt = day.replace(hour=hour, minute=minute, second=0, microsecond=0)
    # A clock time well before the reference belongs to the next service day.
    if dt.timestamp() < reference_epoch - 12 * 3600:
        dt = dt + timedelta(days=1)
    return int(dt.timestamp())


def service_date(epoch: int) -> str:
    return datetime.fromtimestamp(epoch, tz=transit_timezone()).strftime("%Y%m%d")


def format_local_time(epoch: int) -> str:
    dt = datetime.fromtimestamp(epoch, tz=transit_timezone())
    return dt.strftime("%I:%M %p").lstrip("0")


def minutes_between(start_epoch: int, end_epoch: int) -> int:
    """Whole minutes from start to end, halves rounded up."""

    return math.floor((end_epoch - start_epoch) / 60 + 0.5)
