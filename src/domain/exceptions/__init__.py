from .transit import (
    AuthenticationFailed,
    InvalidInput,
    NotFound,
    SourceUnavailable,
    TransitError,
    UnsupportedSystem,
)

__all__ = [
    "AuthenticationFailed",
    "InvalidInput",
    "NotFound",
    "SourceUnavailable",
    "TransitError",
    "UnsupportedSystem",
]
