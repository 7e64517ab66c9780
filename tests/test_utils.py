"""Unit tests for key naming and executor utilities."""

import threading

import pytest

from cacheplex.utils import (
    DEFAULT_PREFIX,
    BlockingExecutor,
    KeyNamer,
    generate_cache_key,
    ttl_to_seconds,
)


class TestKeyNaming:
    def test_generate_cache_key(self):
        assert generate_cache_key("foo") == f"{DEFAULT_PREFIX}:foo"
        assert generate_cache_key("foo", "app", "/") == "app/foo"

    def test_generate_cache_key_without_prefix(self):
        assert generate_cache_key("foo", None) == "foo"
        assert generate_cache_key(42, "") == "42"

    def test_key_namer(self):
        namer = KeyNamer("sessions")
        assert namer("abc") == "sessions:abc"
        assert KeyNamer() == KeyNamer(DEFAULT_PREFIX, ":")


class TestTtlToSeconds:
    @pytest.mark.parametrize(
        "timeout, expected",
        [(1, 1), (999, 1), (1000, 1), (1001, 2), (300000, 300)],
    )
    def test_rounds_up(self, timeout, expected):
        assert ttl_to_seconds(timeout) == expected


class TestBlockingExecutor:
    @pytest.mark.asyncio
    async def test_runs_off_the_event_loop_thread(self):
        executor = BlockingExecutor("cacheplex-test")
        try:
            name = await executor.run(lambda: threading.current_thread().name)
        finally:
            executor.shutdown()

        assert name.startswith("cacheplex-test")

    @pytest.mark.asyncio
    async def test_passes_arguments(self):
        executor = BlockingExecutor()
        try:
            result = await executor.run(pow, 2, 10)
            joined = await executor.run("-".join, ["a", "b"])
        finally:
            executor.shutdown()

        assert result == 1024
        assert joined == "a-b"

    @pytest.mark.asyncio
    async def test_propagates_exceptions(self):
        executor = BlockingExecutor()
        try:
            with pytest.raises(ZeroDivisionError):
                await executor.run(lambda: 1 / 0)
        finally:
            executor.shutdown()
