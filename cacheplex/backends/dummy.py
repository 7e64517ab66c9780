"""Dummy cache backend that stores nothing."""

import logging
from typing import Any

from .base import CacheBackend

logger = logging.getLogger(__name__)


class DummyCacheBackend(CacheBackend):
    """No-op backend for testing. Every read misses."""

    name = "dummy"

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        logger.info("Dummy cache backend configured")
        logger.warning("The dummy backend is for testing purposes only")

    async def add(self, key: str, value: Any, timeout: int | None = None) -> Any:
        return None

    async def get(self, *keys: str) -> Any:
        self._require_keys(keys)
        return self._collect(keys, [None] * len(keys))

    async def set(self, key: str, value: Any, timeout: int | None = None) -> Any:
        return value

    async def incr(self, key: str, timeout: int | None = None) -> int:
        return 1

    async def decr(self, key: str, timeout: int | None = None) -> int:
        return 0

    async def push(self, key: str, value: Any, timeout: int | None = None) -> list:
        return [value]

    async def pop(
        self, key: str, value: Any = None, timeout: int | None = None
    ) -> Any:
        return None

    async def has(self, key: str) -> bool:
        return False

    async def touch(self, key: str, timeout: int | None = None) -> bool:
        return False

    async def flush(self) -> None:
        return None

    async def close(self) -> None:
        self._closed = True
