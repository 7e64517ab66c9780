"""Pytest configuration and fixtures for cacheplex tests."""

import shutil
import tempfile
import time

import fakeredis
import pytest
from bmemcached.exceptions import MemcachedException

from cacheplex.backends.disk import DiskCacheBackend
from cacheplex.backends.memcached import MemcachedCacheBackend
from cacheplex.backends.memory import MemoryCacheBackend
from cacheplex.backends.redis import RedisCacheBackend
from cacheplex.config import reset_config
from cacheplex.events import EventEmitter, emitter


@pytest.fixture(autouse=True)
def reset_cache_config():
    """Reset cache configuration and listeners before each test."""
    reset_config()
    emitter.remove_all_listeners()
    yield
    reset_config()
    emitter.remove_all_listeners()


@pytest.fixture(autouse=True)
def clean_memcachier_env(monkeypatch):
    """Keep host memcached settings out of location resolution."""
    for name in ("MEMCACHIER_SERVERS", "MEMCACHIER_USERNAME", "MEMCACHIER_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def events():
    """Provide a private event emitter."""
    return EventEmitter()


@pytest.fixture
def memory_backend(events):
    """Provide a fresh memory backend for testing."""
    return MemoryCacheBackend(emitter=events)


@pytest.fixture
def redis_backend(events):
    """Provide a redis backend over a private fake server."""
    client = fakeredis.FakeAsyncRedis(
        server=fakeredis.FakeServer(), decode_responses=True
    )
    return RedisCacheBackend(client=client, emitter=events)


class FakeMemcacheClient:
    """
    In-process stand-in for the bmemcached client calls the backend makes.

    Like the real client, str values come back as str and bytes values as
    bytes, and incr/decr create a missing key holding ``default``.
    """

    def __init__(self):
        self.store: dict[str, tuple[str | bytes, float]] = {}
        self.expires: dict[str, int] = {}
        self.disconnected = False

    def _live(self, key):
        item = self.store.get(key)
        if item is None:
            return None
        value, deadline = item
        if deadline and time.time() >= deadline:
            del self.store[key]
            return None
        return value

    def _write(self, key, value, time_):
        self.store[key] = (value, time.time() + time_ if time_ else 0)
        self.expires[key] = time_

    def get(self, key, default=None, get_cas=False):
        value = self._live(key)
        return default if value is None else value

    def get_multi(self, keys, get_cas=False):
        found = {}
        for key in keys:
            value = self._live(key)
            if value is not None:
                found[key] = value
        return found

    def set(self, key, value, time=0, compress_level=-1):
        self._write(key, value, time)
        return True

    def add(self, key, value, time=0, compress_level=-1):
        if self._live(key) is not None:
            return False
        self._write(key, value, time)
        return True

    def _delta(self, key, delta, default, time_):
        value = self._live(key)
        if value is None:
            self._write(key, str(default), time_)
            return default
        if isinstance(value, bytes) or not value.isdigit():
            raise MemcachedException(
                "Code: 6 Message: Incr/Decr on non-numeric value", 6
            )
        number = max(0, int(value) + delta)
        _, deadline = self.store[key]
        self.store[key] = (str(number), deadline)
        return number

    def incr(self, key, value, default=0, time=1000000):
        return self._delta(key, value, default, time)

    def decr(self, key, value, default=0, time=100):
        return self._delta(key, -value, default, time)

    def flush_all(self, time=0):
        self.store.clear()
        return True

    def disconnect_all(self):
        self.disconnected = True


@pytest.fixture
def memcache_client():
    """Provide a fake memcache client."""
    return FakeMemcacheClient()


@pytest.fixture
def memcached_backend(memcache_client, events):
    """Provide a memcached backend over the fake client."""
    return MemcachedCacheBackend(client=memcache_client, emitter=events)


@pytest.fixture
def temp_cache_dir():
    """Provide a temporary directory for disk cache tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def disk_backend(temp_cache_dir, events):
    """Provide a disk backend with temporary directory."""
    return DiskCacheBackend(cache_dir=temp_cache_dir, emitter=events)
