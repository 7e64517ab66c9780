"""Disk-based cache backend using diskcache."""

import logging
from pathlib import Path
from typing import Any

import diskcache

from ..exceptions import InvalidOperation
from ..serializers import is_number, to_list
from ..utils import BlockingExecutor, ttl_to_seconds
from .base import CacheBackend

logger = logging.getLogger(__name__)

_MISSING = object()


class DiskCacheBackend(CacheBackend):
    """
    Disk-based cache backend using diskcache.

    Values keep their Python type. Read-modify-write operations run inside
    ``Cache.transact()`` so they are atomic across threads and processes
    sharing ``cache_dir``. Expiry has one second resolution.

    Options:
        cache_dir: Directory holding the cache files (default ``./.cache``).
    """

    name = "disk"

    def __init__(self, cache_dir: str | None = None, **kwargs: Any):
        """Initialize disk cache backend."""
        super().__init__(**kwargs)
        self.cache_dir = cache_dir or self.options.pop("cache_dir", None) or self.location or "./.cache"
        Path(self.cache_dir).mkdir(parents=True, exist_ok=True)
        self._cache = diskcache.Cache(self.cache_dir, **self.options)
        self._executor = BlockingExecutor("cacheplex-disk")

    def _expire(self, timeout: int | None) -> int:
        return ttl_to_seconds(self.ttl(timeout))

    def _add(self, key: str, value: Any, expire: int) -> Any:
        with self._cache.transact():
            current = self._cache.get(key, default=_MISSING)
            if current is not _MISSING:
                return current
            self._cache.set(key, value, expire=expire)
            return value

    def _step(self, key: str, delta: int, expire: int) -> int:
        with self._cache.transact():
            current = self._cache.get(key)
            value = (current if is_number(current) else 0) + delta
            self._cache.set(key, value, expire=expire)
            return value

    def _push(self, key: str, value: Any, expire: int) -> list:
        with self._cache.transact():
            items = to_list(self._cache.get(key))
            items.append(value)
            self._cache.set(key, items, expire=expire)
            return items

    def _pop(self, key: str, value: Any, expire: int) -> Any:
        with self._cache.transact():
            current = self._cache.get(key, default=_MISSING)
            if current is _MISSING:
                return None
            if not isinstance(current, list):
                raise InvalidOperation(
                    f"Can not call pop on {type(current).__name__} values"
                )

            items = list(current)
            if value is not None:
                try:
                    items.remove(value)
                    result = value
                except ValueError:
                    result = False
            else:
                result = items.pop() if items else None

            self._cache.set(key, items, expire=expire)
            return result

    async def add(self, key: str, value: Any, timeout: int | None = None) -> Any:
        self.ensure_open()
        return await self._executor.run(
            self._add, self.make_key(key), value, self._expire(timeout)
        )

    async def get(self, *keys: str) -> Any:
        self.ensure_open()
        self._require_keys(keys)
        _keys = [self.make_key(key) for key in keys]
        values = await self._executor.run(lambda: [self._cache.get(k) for k in _keys])
        return self._collect(keys, values)

    async def set(self, key: str, value: Any, timeout: int | None = None) -> Any:
        self.ensure_open()
        _key = self.make_key(key)
        logger.debug(f"set {_key}")
        await self._executor.run(
            self._cache.set, _key, value, expire=self._expire(timeout)
        )
        return value

    async def incr(self, key: str, timeout: int | None = None) -> int:
        self.ensure_open()
        return await self._executor.run(
            self._step, self.make_key(key), 1, self._expire(timeout)
        )

    async def decr(self, key: str, timeout: int | None = None) -> int:
        self.ensure_open()
        return await self._executor.run(
            self._step, self.make_key(key), -1, self._expire(timeout)
        )

    async def push(self, key: str, value: Any, timeout: int | None = None) -> list:
        self.ensure_open()
        return await self._executor.run(
            self._push, self.make_key(key), value, self._expire(timeout)
        )

    async def pop(
        self, key: str, value: Any = None, timeout: int | None = None
    ) -> Any:
        self.ensure_open()
        return await self._executor.run(
            self._pop, self.make_key(key), value, self._expire(timeout)
        )

    async def has(self, key: str) -> bool:
        self.ensure_open()
        _key = self.make_key(key)
        return await self._executor.run(self._cache.__contains__, _key)

    async def touch(self, key: str, timeout: int | None = None) -> bool:
        self.ensure_open()
        return await self._executor.run(
            self._cache.touch, self.make_key(key), expire=self._expire(timeout)
        )

    async def flush(self) -> None:
        self.ensure_open()
        await self._executor.run(self._cache.clear)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._executor.run(self._cache.close)
        finally:
            self._executor.shutdown()
