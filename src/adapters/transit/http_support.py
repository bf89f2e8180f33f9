from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from google.protobuf.message import DecodeError

from src.domain.exceptions import SourceUnavailable
from src.domain.models import TransitSystem


def env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return float(raw)


def parse_headers(raw: str | None) -> dict[str, str]:
    """Parse 'Key:Value;Key2:Value2' into a header dict."""

    text = (raw or "").strip()
    if not text:
        return {}
    headers: dict[str, str] = {}
    for part in text.split(";"):
        part = part.strip()
        if ":" not in part:
            continue
        k, v = part.split(":", 1)
        k = k.strip()
        if k:
            headers[k] = v.strip()
    return headers


def strip_prefix(stop_id: str, *prefixes: str) -> str:
    for prefix in prefixes:
        if stop_id.startswith(prefix):
            return stop_id[len(prefix) :]
    return stop_id


@asynccontextmanager
async def upstream_errors(system: TransitSystem, what: str) -> AsyncIterator[None]:
    """Translate transport and payload failures into `SourceUnavailable`."""

    try:
        yield
    except httpx.TimeoutException as exc:
        raise SourceUnavailable(system.value, f"{what} timed out") from exc
    except httpx.HTTPStatusError as exc:
        raise SourceUnavailable(
            system.value, f"{what} returned HTTP {exc.response.status_code}"
        ) from exc
    except httpx.HTTPError as exc:
        raise SourceUnavailable(system.value, f"{what} failed: {exc}") from exc
    except DecodeError as exc:
        raise SourceUnavailable(system.value, f"{what} could not be decoded") from exc
    except ValueError as exc:
        # json.JSONDecodeError and malformed payload shapes.
        raise SourceUnavailable(
            system.value, f"{what} returned an unreadable payload"
        ) from exc
