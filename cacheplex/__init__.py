"""cacheplex - one async cache API over memory, Redis, memcached and disk."""

__version__ = "0.1.0"

# Backends (for advanced usage)
from .backends import (
    CacheBackend,
    DiskCacheBackend,
    DummyCacheBackend,
    MemcachedCacheBackend,
    MemoryCacheBackend,
    RedisCacheBackend,
)

# Configuration
from .config import CacheConfig, CacheSettings, configure, get_config, reset_config

# Default cache shortcuts and events
from .core import (
    add,
    add_listener,
    caches,
    close,
    close_all,
    decr,
    emit,
    flush,
    get,
    get_registry,
    has,
    incr,
    on,
    once,
    pop,
    push,
    remove_all_listeners,
    remove_listener,
    set,
    touch,
)
from .events import EventEmitter
from .exceptions import (
    CacheClosedError,
    CacheError,
    CacheNotImplementedError,
    ImproperlyConfigured,
    InvalidOperation,
)
from .registry import CacheRegistry, register_backend

# Utilities (for advanced usage)
from .serializers import typecast
from .utils import KeyNamer, generate_cache_key

__all__ = [
    # Backends
    "CacheBackend",
    "DiskCacheBackend",
    "DummyCacheBackend",
    "MemcachedCacheBackend",
    "MemoryCacheBackend",
    "RedisCacheBackend",
    # Configuration
    "CacheConfig",
    "CacheSettings",
    "configure",
    "get_config",
    "reset_config",
    # Registry
    "CacheRegistry",
    "register_backend",
    "get_registry",
    "caches",
    # Default cache
    "add",
    "close",
    "close_all",
    "decr",
    "flush",
    "get",
    "has",
    "incr",
    "pop",
    "push",
    "set",
    "touch",
    # Events
    "EventEmitter",
    "add_listener",
    "emit",
    "on",
    "once",
    "remove_all_listeners",
    "remove_listener",
    # Errors
    "CacheClosedError",
    "CacheError",
    "CacheNotImplementedError",
    "ImproperlyConfigured",
    "InvalidOperation",
    # Utilities
    "KeyNamer",
    "generate_cache_key",
    "typecast",
]
