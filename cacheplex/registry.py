"""Registry of named cache backends with default-cache shortcuts."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from .backends import (
    CacheBackend,
    DiskCacheBackend,
    DummyCacheBackend,
    MemcachedCacheBackend,
    MemoryCacheBackend,
    RedisCacheBackend,
)
from .config import CacheSettings
from .events import EventEmitter
from .events import emitter as process_emitter
from .exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)

DEFAULT_CACHE = "default"

BACKENDS: dict[str, Callable[..., CacheBackend]] = {
    "base": CacheBackend,
    "dummy": DummyCacheBackend,
    "memory": MemoryCacheBackend,
    "redis": RedisCacheBackend,
    "memcached": MemcachedCacheBackend,
    "disk": DiskCacheBackend,
}


def register_backend(name: str, backend: Callable[..., CacheBackend]) -> None:
    """Make a backend class available by name in cache settings."""
    if not callable(backend):
        raise TypeError(f"Backend {name!r} must be callable, got {backend!r}")
    BACKENDS[name] = backend


def resolve_backend(backend: Any) -> Callable[..., CacheBackend]:
    """Resolve a backend name or class to a constructor."""
    if isinstance(backend, str):
        try:
            return BACKENDS[backend]
        except KeyError:
            raise ImproperlyConfigured(
                f"Unable to locate cache backend {backend}"
            ) from None
    if callable(backend):
        return backend
    raise ImproperlyConfigured(f"Invalid cache backend: {backend!r}")


class CacheRegistry:
    """
    Named cache backends, built from settings.

    Calling the registry (or indexing it) with a cache name returns that
    backend. The coroutine shortcuts (``get``, ``set``, ...) act on the
    default cache: the one named ``default`` or marked ``default=True``.

    A backend that cannot be resolved is registered as ``None`` and reported
    through the ``error`` event instead of raising. A missing default cache,
    or more than one, raises :class:`ImproperlyConfigured`.

    Args:
        caches: Mapping of cache name to :class:`CacheSettings` or a plain
            settings mapping.
        emitter: Event emitter shared with every backend. Defaults to the
            process-wide emitter.
    """

    def __init__(
        self,
        caches: Mapping[str, CacheSettings | Mapping[str, Any]],
        emitter: EventEmitter | None = None,
    ):
        self.emitter = emitter if emitter is not None else process_emitter
        self._caches: dict[str, CacheBackend | None] = {}
        defaults: list[str] = []

        for name, settings in caches.items():
            if not isinstance(settings, CacheSettings):
                settings = CacheSettings.from_mapping(settings)

            if name == DEFAULT_CACHE or settings.default:
                logger.debug(f"setting {name} cache backend as default")
                defaults.append(name)

            self._caches[name] = self._load(name, settings)

        if not defaults:
            raise ImproperlyConfigured(
                "No default cache defined", code="ECACHEDEFAULT"
            )
        if len(defaults) > 1:
            raise ImproperlyConfigured(
                f"Only one default cache may be defined, got {', '.join(defaults)}",
                code="ECACHEDEFAULT",
            )
        default_name = defaults[0]
        if default_name != DEFAULT_CACHE:
            self._caches[DEFAULT_CACHE] = self._caches[default_name]
        self.default_name = default_name

    def _load(self, name: str, settings: CacheSettings) -> CacheBackend | None:
        try:
            backend_cls = resolve_backend(settings.backend)
            logger.debug(f"loading {settings.backend} cache backend for {name}")
            return backend_cls(emitter=self.emitter, **settings.backend_kwargs())
        except ImproperlyConfigured as e:
            logger.error(f"unable to load cache {name}: {e.message}")
            self.emitter.emit("error", e)
            return None

    def backend(self, name: str) -> CacheBackend:
        """Return the backend registered under name."""
        if name not in self._caches:
            raise ImproperlyConfigured(f"No cache {name} found")
        backend = self._caches[name]
        if backend is None:
            raise ImproperlyConfigured(f"Cache {name} failed to load")
        return backend

    __call__ = backend
    __getitem__ = backend

    def __contains__(self, name: object) -> bool:
        return name in self._caches

    def names(self) -> list[str]:
        """Names of every configured cache, loaded or not."""
        return list(self._caches)

    def open_backends(self) -> list[CacheBackend]:
        """Loaded backends that have not been closed."""
        found: dict[int, CacheBackend] = {}
        for backend in self._caches.values():
            if backend is not None and not backend.closed:
                found[id(backend)] = backend
        return list(found.values())

    @property
    def default(self) -> CacheBackend:
        return self.backend(DEFAULT_CACHE)

    # Shortcuts to the default cache

    async def add(self, key: str, value: Any, timeout: int | None = None) -> Any:
        return await self.default.add(key, value, timeout)

    async def get(self, *keys: str) -> Any:
        return await self.default.get(*keys)

    async def set(self, key: str, value: Any, timeout: int | None = None) -> Any:
        return await self.default.set(key, value, timeout)

    async def incr(self, key: str, timeout: int | None = None) -> int:
        return await self.default.incr(key, timeout)

    async def decr(self, key: str, timeout: int | None = None) -> int:
        return await self.default.decr(key, timeout)

    async def push(self, key: str, value: Any, timeout: int | None = None) -> list:
        return await self.default.push(key, value, timeout)

    async def pop(self, key: str, value: Any = None, timeout: int | None = None) -> Any:
        return await self.default.pop(key, value, timeout)

    async def has(self, key: str) -> bool:
        return await self.default.has(key)

    async def touch(self, key: str, timeout: int | None = None) -> bool:
        return await self.default.touch(key, timeout)

    async def flush(self) -> None:
        return await self.default.flush()

    async def close(self) -> None:
        return await self.default.close()

    async def close_all(self) -> None:
        """Close every open backend once."""
        for backend in self.open_backends():
            await backend.close()

    # Event surface

    def on(self, event: str, listener: Callable[..., Any]) -> Callable[..., Any]:
        return self.emitter.on(event, listener)

    def add_listener(self, event: str, listener: Callable[..., Any]) -> Callable[..., Any]:
        return self.emitter.add_listener(event, listener)

    def once(self, event: str, listener: Callable[..., Any]) -> Callable[..., Any]:
        return self.emitter.once(event, listener)

    def remove_listener(self, event: str, listener: Callable[..., Any]) -> None:
        self.emitter.remove_listener(event, listener)

    def remove_all_listeners(self, event: str | None = None) -> None:
        self.emitter.remove_all_listeners(event)

    def emit(self, event: str, *args: Any) -> bool:
        return self.emitter.emit(event, *args)
