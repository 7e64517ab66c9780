"""Cache backend implementations."""

from .base import CacheBackend
from .disk import DiskCacheBackend
from .dummy import DummyCacheBackend
from .memcached import MemcachedCacheBackend
from .memory import MemoryCacheBackend
from .redis import RedisCacheBackend

__all__ = [
    "CacheBackend",
    "DiskCacheBackend",
    "DummyCacheBackend",
    "MemcachedCacheBackend",
    "MemoryCacheBackend",
    "RedisCacheBackend",
]
