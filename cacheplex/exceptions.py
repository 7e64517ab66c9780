"""Exceptions raised by cache backends and the cache registry."""

from typing import Any


class CacheError(Exception):
    """Base exception for cache operations.

    Attributes:
        message: Human-readable error description.
        code: Stable error code, safe to match on.
        type: Stable error kind.
        details: Optional dictionary with additional error context.
    """

    default_code: Any = "ECACHE"
    default_type: str = "cache_error"

    def __init__(
        self,
        message: str,
        code: Any = None,
        type: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code if code is not None else self.default_code
        self.type = type or self.default_type
        self.details = details or {}
        super().__init__(self.message)


class CacheNotImplementedError(CacheError, NotImplementedError):
    """Raised when an operation is called on the base backend."""

    default_code = "ENOTIMPLEMENTED"
    default_type = "not_implemented"


class InvalidOperation(CacheError):
    """Raised when a list operation is called on a value that is not a list."""

    default_code = 6000
    default_type = "invalid_operation"


class ImproperlyConfigured(CacheError):
    """Raised for a missing default cache, unknown backend or unknown cache name."""

    default_code = "ECACHE"
    default_type = "improperly_configured"


class CacheClosedError(CacheError):
    """Raised when a backend is used after close()."""

    default_code = "ECACHECLOSED"
    default_type = "cache_closed"
