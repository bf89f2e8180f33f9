from __future__ import annotations


class TransitError(Exception):
    """Base exception for trip resolution failures."""


class InvalidInput(TransitError):
    """Raised when a leg descriptor is malformed; no I/O has been attempted."""


class NotFound(TransitError):
    """Raised when no qualifying trip exists for a leg, or a trip key misses."""


class UnsupportedSystem(TransitError):
    """Raised when no adapter is registered for a transit system."""

    def __init__(self, system: str, detail: str | None = None) -> None:
        self.system = system
        super().__init__(detail or f"Live data unavailable for {system}")


class SourceUnavailable(TransitError):
    """Raised by an adapter on timeout, network, decode or auth failure."""

    def __init__(self, system: str, detail: str) -> None:
        self.system = system
        self.detail = detail
        super().__init__(f"{system} source unavailable: {detail}")


class AuthenticationFailed(SourceUnavailable):
    """Raised when a session-token login is rejected."""
