from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

import httpx

from src.adapters.transit.http_support import env_float, upstream_errors
from src.adapters.transit.session_token import SessionTokenProvider
from src.app.ports.output import ITransitSystemAdapter
from src.domain.exceptions import AuthenticationFailed, SourceUnavailable


def _form(fields: Mapping[str, str]) -> dict[str, tuple[None, str]]:
    # NJT endpoints only accept multipart/form-data.
    return {k: (None, v) for k, v in fields.items()}


@dataclass(slots=True)
class NjtRestAdapter(ITransitSystemAdapter):
    """Shared plumbing for the NJ Transit session-token REST APIs.

    Every call carries a `token` form field obtained from the system's login
    endpoint and cached by a `SessionTokenProvider`.
    """

    base_url_env: ClassVar[str]
    default_base_url: ClassVar[str]
    token_file_env: ClassVar[str]
    login_endpoint: ClassVar[str]

    base_url: str | None = None
    username: str | None = None
    password: str | None = None
    token_file: str | None = None
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None
    tokens: SessionTokenProvider | None = None

    def __post_init__(self) -> None:
        if self.base_url is None:
            self.base_url = os.getenv(self.base_url_env, self.default_base_url)
        if self.username is None:
            self.username = os.getenv("NJT_API_USERNAME")
        if self.password is None:
            self.password = os.getenv("NJT_API_PASSWORD")
        if self.token_file is None:
            self.token_file = os.getenv(self.token_file_env) or None
        self.timeout_s = env_float("TRANSIT_HTTP_TIMEOUT_S", self.timeout_s)

    def _token_provider(self) -> SessionTokenProvider:
        if self.tokens is None:
            self.tokens = SessionTokenProvider(
                system=self.system, login=self._login, token_file=self.token_file
            )
        return self.tokens

    def _url(self, endpoint: str) -> str:
        return f"{(self.base_url or '').rstrip('/')}/{endpoint}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport)

    async def _login(self) -> str:
        if not self.username or not self.password:
            raise AuthenticationFailed(
                self.system.value, "NJT_API_USERNAME / NJT_API_PASSWORD are not set"
            )

        async with upstream_errors(self.system, "login"):
            async with self._client() as client:
                resp = await client.post(
                    self._url(self.login_endpoint),
                    files=_form({"username": self.username, "password": self.password}),
                )
                resp.raise_for_status()
                data = resp.json()

        if not isinstance(data, dict):
            raise AuthenticationFailed(self.system.value, "unexpected login response")
        authenticated = str(data.get("Authenticated", "")).strip().lower() == "true"
        token = data.get("UserToken")
        if not authenticated or not token:
            reason = data.get("errorMessage") or "credentials rejected"
            raise AuthenticationFailed(self.system.value, str(reason))
        return str(token)

    async def _post(self, endpoint: str, fields: Mapping[str, str]) -> Any:
        tokens = self._token_provider()
        token = await tokens.get_token()

        async with upstream_errors(self.system, endpoint):
            async with self._client() as client:
                resp = await client.post(
                    self._url(endpoint), files=_form({**fields, "token": token})
                )
            if resp.status_code in (401, 403):
                tokens.invalidate()
                raise AuthenticationFailed(
                    self.system.value, f"{endpoint} rejected the session token"
                )
            resp.raise_for_status()
            data = resp.json()

        if isinstance(data, dict) and data.get("errorMessage"):
            message = str(data["errorMessage"])
            if "token" in message.lower():
                tokens.invalidate()
                raise AuthenticationFailed(self.system.value, message)
            raise SourceUnavailable(self.system.value, f"{endpoint}: {message}")
        return data
