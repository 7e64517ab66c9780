"""Utility functions for cache backends."""

import asyncio
import functools
import math
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

DEFAULT_PREFIX = "cacheplex"
DEFAULT_SEPARATOR = ":"
DEFAULT_TIMEOUT = 1000 * 60 * 5


def generate_cache_key(
    key: str,
    prefix: str | None = DEFAULT_PREFIX,
    separator: str = DEFAULT_SEPARATOR,
) -> str:
    """Generate a namespaced cache key from a raw key."""
    # Format as prefix:key
    if prefix:
        return f"{prefix}{separator}{key}"
    return str(key)


@dataclass(frozen=True)
class KeyNamer:
    """Callable that namespaces raw keys with a fixed prefix."""

    prefix: str | None = DEFAULT_PREFIX
    separator: str = DEFAULT_SEPARATOR

    def __call__(self, key: str) -> str:
        return generate_cache_key(key, self.prefix, self.separator)


def ttl_to_seconds(timeout: int) -> int:
    """
    Convert a ttl in milliseconds to whole seconds, rounding up.

    Never returns 0: memcached and diskcache treat a zero expiry as
    "never expire".
    """
    return max(1, math.ceil(timeout / 1000))


class BlockingExecutor:
    """Runs blocking client calls on a dedicated worker thread.

    A single worker keeps calls against a non thread-safe client serialized.
    """

    def __init__(self, name: str = "cacheplex"):
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)

    async def run(self, func: Callable, *args: Any, **kwargs: Any) -> Any:
        """Run func(*args, **kwargs) on the worker thread and await the result."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._pool, functools.partial(func, *args, **kwargs)
        )

    def shutdown(self) -> None:
        """Stop the worker thread once pending calls finish."""
        self._pool.shutdown(wait=False)
