"""Base class defining the cache backend contract."""

import logging
from collections.abc import Callable
from typing import Any

from ..events import EventEmitter
from ..events import emitter as process_emitter
from ..exceptions import CacheClosedError, CacheNotImplementedError
from ..utils import DEFAULT_PREFIX, DEFAULT_SEPARATOR, DEFAULT_TIMEOUT, KeyNamer

logger = logging.getLogger(__name__)


class CacheBackend:
    """
    Base cache backend.

    Defines the operations every backend provides. Each operation on this
    class logs, emits an ``error`` event and raises
    :class:`CacheNotImplementedError`; concrete backends override all of them.

    Args:
        prefix: Namespace prepended to every key.
        separator: Text between prefix and key.
        timeout: Default ttl in milliseconds.
        key_fn: Custom function turning a raw key into a stored key.
            Replaces the prefix based namer when given.
        location: Connection information for networked backends.
        options: Extra backend or client options.
        emitter: Event emitter for error notifications. Defaults to the
            process-wide emitter.
    """

    name = "base"

    def __init__(
        self,
        *,
        prefix: str | None = DEFAULT_PREFIX,
        separator: str = DEFAULT_SEPARATOR,
        timeout: int | None = DEFAULT_TIMEOUT,
        key_fn: Callable[[str], str] | None = None,
        location: Any = None,
        options: dict[str, Any] | None = None,
        emitter: EventEmitter | None = None,
    ):
        self.prefix = prefix
        self.timeout = timeout or DEFAULT_TIMEOUT
        self.location = location
        self.options = dict(options or {})
        self.emitter = emitter if emitter is not None else process_emitter
        self.make_key = key_fn or KeyNamer(prefix, separator)
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed

    def ttl(self, timeout: int | None = None) -> int:
        """Resolve a per-call ttl override against the instance default."""
        return timeout or self.timeout

    def ensure_open(self) -> None:
        """Fail fast when the backend has been closed."""
        if self._closed:
            raise CacheClosedError(f"{type(self).__name__} is closed")

    def _not_implemented(self, operation: str) -> CacheNotImplementedError:
        e = CacheNotImplementedError(
            f"Subclass of base cache must implement {operation}() method"
        )
        logger.error(f"cache error: {type(e).__name__}: {e.message}")
        self.emitter.emit("error", e)
        return e

    async def add(self, key: str, value: Any, timeout: int | None = None) -> Any:
        """Set a value only if the key holds no live value. Returns the stored value."""
        raise self._not_implemented("add")

    async def get(self, *keys: str) -> Any:
        """Get one value, or a mapping of raw key to value for several keys."""
        raise self._not_implemented("get")

    async def set(self, key: str, value: Any, timeout: int | None = None) -> Any:
        """Set a value and reset its ttl. Returns the value."""
        raise self._not_implemented("set")

    async def incr(self, key: str, timeout: int | None = None) -> int:
        """Increment a counter by one. Returns the new value."""
        raise self._not_implemented("incr")

    async def decr(self, key: str, timeout: int | None = None) -> int:
        """Decrement a counter by one. Returns the new value."""
        raise self._not_implemented("decr")

    async def push(self, key: str, value: Any, timeout: int | None = None) -> list:
        """Append a value to the list at key. Returns the list."""
        raise self._not_implemented("push")

    async def pop(
        self, key: str, value: Any = None, timeout: int | None = None
    ) -> Any:
        """
        Remove a value from the list at key.

        With ``value``, removes its first occurrence and returns it, or False
        when not found. Without, removes and returns the last element.
        """
        raise self._not_implemented("pop")

    async def has(self, key: str) -> bool:
        """Check if key holds a live value."""
        raise self._not_implemented("has")

    async def touch(self, key: str, timeout: int | None = None) -> bool:
        """Reset the ttl of key. Returns False if the key is absent."""
        raise self._not_implemented("touch")

    async def flush(self) -> None:
        """Remove every entry from the backend."""
        raise self._not_implemented("flush")

    async def close(self) -> None:
        """Release the backend's connection."""
        raise self._not_implemented("close")

    def _collect(self, keys: tuple[str, ...], values: list[Any]) -> Any:
        """Shape get() results: bare value for one key, mapping for several."""
        if len(keys) == 1:
            return values[0]
        return dict(zip(keys, values))

    def _require_keys(self, keys: tuple[str, ...]) -> None:
        if not keys:
            raise ValueError("get() requires at least one key")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} prefix={self.prefix!r}>"
