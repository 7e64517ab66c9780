"""Module-level shortcuts to the process registry's default cache."""

import logging
from collections.abc import Callable
from typing import Any

from .backends import CacheBackend
from .config import get_config
from .events import emitter
from .registry import CacheRegistry

logger = logging.getLogger(__name__)


def get_registry() -> CacheRegistry:
    """Get the registry built from the global configuration."""
    return get_config().get_registry()


def caches(name: str) -> CacheBackend:
    """Get a named cache backend."""
    return get_registry().backend(name)


async def add(key: str, value: Any, timeout: int | None = None) -> Any:
    """Set a value on the default cache if the key holds none."""
    return await get_registry().add(key, value, timeout)


async def get(*keys: str) -> Any:
    """Get one or more values from the default cache."""
    return await get_registry().get(*keys)


async def set(key: str, value: Any, timeout: int | None = None) -> Any:  # noqa: A001
    """Set a value on the default cache."""
    return await get_registry().set(key, value, timeout)


async def incr(key: str, timeout: int | None = None) -> int:
    return await get_registry().incr(key, timeout)


async def decr(key: str, timeout: int | None = None) -> int:
    return await get_registry().decr(key, timeout)


async def push(key: str, value: Any, timeout: int | None = None) -> list:
    """Append a value to a list on the default cache."""
    return await get_registry().push(key, value, timeout)


async def pop(key: str, value: Any = None, timeout: int | None = None) -> Any:
    """Remove a value from a list on the default cache."""
    return await get_registry().pop(key, value, timeout)


async def has(key: str) -> bool:
    return await get_registry().has(key)


async def touch(key: str, timeout: int | None = None) -> bool:
    return await get_registry().touch(key, timeout)


async def flush() -> None:
    """Clear the default cache."""
    await get_registry().flush()


async def close() -> None:
    """Close the default cache."""
    await get_registry().close()


async def close_all() -> None:
    """Close every configured cache and drop the registry."""
    config = get_config()
    if config._registry is None:
        return
    await config._registry.close_all()
    config.reset_registry()
    logger.debug("closed cache registry")


def on(event: str, listener: Callable[..., Any]) -> Callable[..., Any]:
    return emitter.on(event, listener)


def add_listener(event: str, listener: Callable[..., Any]) -> Callable[..., Any]:
    return emitter.add_listener(event, listener)


def once(event: str, listener: Callable[..., Any]) -> Callable[..., Any]:
    return emitter.once(event, listener)


def remove_listener(event: str, listener: Callable[..., Any]) -> None:
    emitter.remove_listener(event, listener)


def remove_all_listeners(event: str | None = None) -> None:
    emitter.remove_all_listeners(event)


def emit(event: str, *args: Any) -> bool:
    return emitter.emit(event, *args)
