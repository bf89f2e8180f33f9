from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path

from src.domain.exceptions import AuthenticationFailed
from src.domain.models import TransitSystem

logger = logging.getLogger(__name__)

TOKEN_LIFETIME_S = 23 * 3600


@dataclass(slots=True)
class SessionTokenProvider:
    """Caches a vendor session token and re-authenticates lazily.

    A token is fetched on first use and again on the first call after it
    expires; there is no background refresh. When `token_file` is set the
    token survives restarts as `{"token": ..., "expires_at": ...}`.
    """

    system: TransitSystem
    login: Callable[[], Awaitable[str]]
    lifetime_s: float = TOKEN_LIFETIME_S
    token_file: str | Path | None = None
    clock: Callable[[], float] = time.time

    _token: str | None = field(default=None, init=False, repr=False)
    _expires_at: float = field(default=0.0, init=False, repr=False)
    _file_checked: bool = field(default=False, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def get_token(self) -> str:
        async with self._lock:
            if not self._file_checked:
                self._file_checked = True
                self._load()

            if self._token and self.clock() < self._expires_at:
                return self._token

            logger.info("Authenticating with %s", self.system.value)
            token = await self.login()
            if not token:
                raise AuthenticationFailed(self.system.value, "login returned no token")

            self._token = token
            self._expires_at = self.clock() + self.lifetime_s
            self._save()
            return token

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = 0.0

    def _path(self) -> Path | None:
        return Path(self.token_file) if self.token_file else None

    def _load(self) -> None:
        path = self._path()
        if path is None or not path.exists():
            return
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            token = str(data["token"])
            expires_at = float(data["expires_at"])
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.warning("Ignoring unreadable token file %s: %s", path, exc)
            return
        self._token = token
        self._expires_at = expires_at

    def _save(self) -> None:
        path = self._path()
        if path is None or self._token is None:
            return
        payload = {"token": self._token, "expires_at": self._expires_at}
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload), encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not persist token to %s: %s", path, exc)
