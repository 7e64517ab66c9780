"""Unit tests for the module-level cache shortcuts."""

import pytest

import cacheplex
from cacheplex import core
from cacheplex.backends import DummyCacheBackend, MemoryCacheBackend
from cacheplex.config import configure, get_config
from cacheplex.exceptions import CacheClosedError, ImproperlyConfigured


class TestDefaultCacheShortcuts:
    """Test the shortcuts acting on the configured default cache."""

    @pytest.mark.asyncio
    async def test_default_configuration_uses_memory(self):
        assert isinstance(core.caches("default"), MemoryCacheBackend)

        await core.set("key", "value")
        assert await core.get("key") == "value"

    @pytest.mark.asyncio
    async def test_shortcuts_round_trip(self):
        assert await core.add("counter", 1) == 1
        assert await core.incr("counter") == 2
        assert await core.decr("counter") == 1
        assert await core.push("queue", "a") == ["a"]
        assert await core.push("queue", "b") == ["a", "b"]
        assert await core.pop("queue", "a") == "a"
        assert await core.has("queue") is True
        assert await core.touch("queue", 1000) is True
        assert await core.get("counter", "queue") == {"counter": 1, "queue": ["b"]}

        await core.flush()
        assert await core.has("counter") is False

    @pytest.mark.asyncio
    async def test_configured_default_cache(self):
        configure(
            caches={
                "primary": {"backend": "dummy", "default": True},
                "local": {"backend": "memory"},
            }
        )

        assert isinstance(core.caches("default"), DummyCacheBackend)
        assert await core.set("key", 1) == 1
        assert await core.get("key") is None

        local = core.caches("local")
        await local.set("key", 1)
        assert await local.get("key") == 1

    def test_unknown_cache(self):
        with pytest.raises(ImproperlyConfigured):
            core.caches("missing")

    def test_missing_default_cache(self):
        configure(caches={"other": {"backend": "memory"}})

        with pytest.raises(ImproperlyConfigured) as exc_info:
            core.get_registry()

        assert exc_info.value.code == "ECACHEDEFAULT"

    @pytest.mark.asyncio
    async def test_close_closes_default_cache(self):
        configure(
            caches={"default": {"backend": "memory"}, "other": {"backend": "memory"}}
        )

        await core.close()

        with pytest.raises(CacheClosedError):
            await core.get("key")
        assert core.caches("other").closed is False

    @pytest.mark.asyncio
    async def test_close_all_drops_registry(self):
        backend = core.caches("default")

        await core.close_all()

        assert backend.closed is True
        assert get_config()._registry is None
        assert core.caches("default") is not backend

    @pytest.mark.asyncio
    async def test_close_all_without_registry(self):
        await core.close_all()
        assert get_config()._registry is None

    def test_package_exports(self):
        assert cacheplex.get is core.get
        assert cacheplex.set is core.set
        assert cacheplex.caches is core.caches


class TestEvents:
    """Test the process-wide event functions."""

    def test_on_and_emit(self):
        calls = []
        core.on("error", calls.append)

        assert core.emit("error", "boom") is True
        assert calls == ["boom"]

    def test_once(self):
        calls = []
        core.once("error", calls.append)

        core.emit("error", 1)
        core.emit("error", 2)

        assert calls == [1]

    def test_remove_listener(self):
        calls = []
        core.add_listener("error", calls.append)
        core.remove_listener("error", calls.append)

        assert core.emit("error", "boom") is False

    def test_remove_all_listeners(self):
        core.on("error", print)
        core.on("ready", print)

        core.remove_all_listeners()

        assert core.emit("error", "boom") is False
        assert core.emit("ready") is False

    @pytest.mark.asyncio
    async def test_registry_errors_reach_process_listeners(self):
        errors = []
        core.on("error", errors.append)

        configure(
            caches={"default": {"backend": "memory"}, "broken": {"backend": "nope"}}
        )
        core.get_registry()

        assert len(errors) == 1
        assert isinstance(errors[0], ImproperlyConfigured)
