"""In-memory cache backend."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import InvalidOperation
from ..serializers import is_number, to_list
from .base import CacheBackend

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """A stored value with its expiry deadline and eviction timer."""

    value: Any
    expires: float
    timer: asyncio.TimerHandle | None = field(default=None, repr=False)

    def expired(self, now: float | None = None) -> bool:
        return (now if now is not None else time.monotonic()) >= self.expires

    def cancel(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class MemoryCacheBackend(CacheBackend):
    """
    In-memory cache backend.

    Each instance owns its own store. Entries are evicted by a timer
    scheduled on the running event loop; reads also check the deadline so an
    entry is gone the moment its ttl elapses. Mutations run under one lock
    per instance, so concurrent incr/push/pop never lose updates.
    """

    name = "memory"

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self._cache: dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()

    def _lookup(self, key: str) -> CacheEntry | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        if entry.expired():
            self._remove(key, entry)
            return None
        return entry

    def _remove(self, key: str, entry: CacheEntry) -> None:
        # A newer entry may have replaced the one whose timer fired
        if self._cache.get(key) is entry:
            entry.cancel()
            del self._cache[key]
            logger.debug(f"evicted {key}")

    def _store(self, key: str, value: Any, timeout: int | None) -> Any:
        ttl = self.ttl(timeout)
        previous = self._cache.get(key)
        if previous is not None:
            previous.cancel()

        entry = CacheEntry(value=value, expires=time.monotonic() + ttl / 1000)
        loop = asyncio.get_running_loop()
        entry.timer = loop.call_later(ttl / 1000, self._remove, key, entry)
        self._cache[key] = entry
        return value

    @staticmethod
    def _copy(value: Any) -> Any:
        return list(value) if isinstance(value, list) else value

    async def add(self, key: str, value: Any, timeout: int | None = None) -> Any:
        self.ensure_open()
        _key = self.make_key(key)
        async with self._lock:
            entry = self._lookup(_key)
            if entry is not None:
                return self._copy(entry.value)
            return self._copy(self._store(_key, self._copy(value), timeout))

    async def get(self, *keys: str) -> Any:
        self.ensure_open()
        self._require_keys(keys)
        values = []
        for key in keys:
            entry = self._lookup(self.make_key(key))
            values.append(None if entry is None else self._copy(entry.value))
        return self._collect(keys, values)

    async def set(self, key: str, value: Any, timeout: int | None = None) -> Any:
        self.ensure_open()
        _key = self.make_key(key)
        async with self._lock:
            self._store(_key, self._copy(value), timeout)
        logger.debug(f"set {_key}")
        return value

    async def _step(self, key: str, delta: int, timeout: int | None) -> int:
        self.ensure_open()
        _key = self.make_key(key)
        async with self._lock:
            entry = self._lookup(_key)
            current = entry.value if entry is not None else None
            value = (current if is_number(current) else 0) + delta
            # Counters refresh their ttl like any other write
            return self._store(_key, value, timeout)

    async def incr(self, key: str, timeout: int | None = None) -> int:
        return await self._step(key, 1, timeout)

    async def decr(self, key: str, timeout: int | None = None) -> int:
        return await self._step(key, -1, timeout)

    async def push(self, key: str, value: Any, timeout: int | None = None) -> list:
        self.ensure_open()
        _key = self.make_key(key)
        async with self._lock:
            entry = self._lookup(_key)
            items = to_list(entry.value if entry is not None else None)
            items.append(value)
            self._store(_key, items, timeout)
            return list(items)

    async def pop(
        self, key: str, value: Any = None, timeout: int | None = None
    ) -> Any:
        self.ensure_open()
        _key = self.make_key(key)
        async with self._lock:
            entry = self._lookup(_key)
            if entry is None:
                return None
            if not isinstance(entry.value, list):
                raise InvalidOperation(
                    f"Can not call pop on {type(entry.value).__name__} values"
                )

            items = list(entry.value)
            if value is not None:
                try:
                    items.remove(value)
                    result = value
                except ValueError:
                    result = False
            else:
                result = items.pop() if items else None

            self._store(_key, items, timeout)
            return result

    async def has(self, key: str) -> bool:
        self.ensure_open()
        return self._lookup(self.make_key(key)) is not None

    async def touch(self, key: str, timeout: int | None = None) -> bool:
        self.ensure_open()
        _key = self.make_key(key)
        async with self._lock:
            entry = self._lookup(_key)
            if entry is None:
                return False
            self._store(_key, entry.value, timeout)
            return True

    async def flush(self) -> None:
        self.ensure_open()
        async with self._lock:
            for entry in self._cache.values():
                entry.cancel()
            self._cache.clear()

    async def close(self) -> None:
        for entry in self._cache.values():
            entry.cancel()
        self._cache.clear()
        self._closed = True

    def __len__(self) -> int:
        now = time.monotonic()
        return sum(1 for entry in self._cache.values() if not entry.expired(now))
