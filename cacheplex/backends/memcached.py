"""
Memcached cache backend using python-binary-memcached.

Memcached only stores text and offers atomic add/incr/decr, so this backend
does the typing and the list handling itself:

- scalars are written as text and typecast back on read
- lists are written as comma-delimited bytes; the client's binary flag is
  what marks a stored value as a list
- lists are updated by read-modify-write, which is not atomic between
  concurrent writers
- expiry is in whole seconds

The binary protocol authenticates with SASL, so credentials from the
location or the environment are sent to the servers.

Server locations can be given as a comma separated string
(``"user:pass@server1:11211,server2"``), a mapping
(``{"host": "server1:11211", "options": {"username": None}}``), or a list
mixing both. Without a location the ``MEMCACHIER_SERVERS`` environment
variable is used; ``MEMCACHIER_USERNAME`` and ``MEMCACHIER_PASSWORD`` supply
credentials for locations that do not carry their own.
"""

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import bmemcached
from bmemcached.exceptions import MemcachedException

from ..config import memcached_env
from ..exceptions import ImproperlyConfigured, InvalidOperation
from ..serializers import (
    decode_list,
    encode_list,
    encode_value,
    is_number,
    to_list,
    typecast,
)
from ..utils import BlockingExecutor, ttl_to_seconds
from .base import CacheBackend

logger = logging.getLogger(__name__)

DEFAULT_PORT = 11211

# Larger expiry values are read by memcached as absolute unix timestamps
MAX_RELATIVE_EXPIRE = 60 * 60 * 24 * 30


@dataclass(frozen=True)
class ServerLocation:
    """One memcached server with optional credentials."""

    host: str
    port: int = DEFAULT_PORT
    username: str | None = None
    password: str | None = None

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def credentials(self) -> tuple[str | None, str | None]:
        return (self.username, self.password)

    def __str__(self) -> str:
        if self.username and self.password:
            return f"{self.username}:{self.password}@{self.address}"
        return self.address


def _location(
    host: str, port: Any, username: str | None, password: str | None
) -> ServerLocation:
    # Credentials are used as a pair or not at all
    if not (username and password):
        username = password = None
    return ServerLocation(host or "localhost", int(port), username, password)


def _parse_string(
    text: str, username: str | None, password: str | None, port: int
) -> ServerLocation:
    auth, _, address = text.rpartition("@")
    host, _, port_text = address.partition(":")
    if auth:
        username, _, password = auth.partition(":")
    return _location(host, port_text or port, username, password)


def _parse_mapping(
    data: Mapping[str, Any], username: str | None, password: str | None, port: int
) -> ServerLocation:
    host, _, port_text = str(data.get("host") or data.get("hostname") or "localhost").partition(":")
    options = data.get("options") or {}

    # An explicit null disables auth for this server
    if "username" in options:
        username = None if typecast(options["username"]) is None else options["username"]
    if "password" in options:
        password = None if typecast(options["password"]) is None else options["password"]

    return _location(host, port_text or data.get("port") or port, username, password)


def resolve_locations(
    location: Any = None,
    *,
    username: str | None = None,
    password: str | None = None,
    port: int = DEFAULT_PORT,
) -> list[ServerLocation]:
    """Resolve configured locations and environment defaults into servers."""
    env = memcached_env()
    username = username or env["username"]
    password = password or env["password"]
    if not location:
        location = env["servers"]

    entries = location if isinstance(location, (list, tuple)) else [location]
    servers: list[ServerLocation] = []
    for entry in entries:
        if isinstance(entry, str):
            for part in entry.split(","):
                part = part.strip()
                if part:
                    servers.append(_parse_string(part, username, password, port))
        elif isinstance(entry, Mapping):
            servers.append(_parse_mapping(entry, username, password, port))
        else:
            raise ImproperlyConfigured(f"Invalid memcached location: {entry!r}")

    if not servers:
        raise ImproperlyConfigured("No memcached servers configured")
    return servers


def shared_credentials(
    servers: list[ServerLocation],
) -> tuple[str | None, str | None]:
    """The one credential pair every server authenticates with."""
    pairs = {server.credentials for server in servers}
    if len(pairs) > 1:
        raise ImproperlyConfigured(
            "memcached servers of one cache must share the same credentials"
        )
    return pairs.pop()


def expire_seconds(timeout: int, now: float | None = None) -> int:
    """
    Convert a ttl in milliseconds to a memcached expiry value.

    Expiries longer than 30 days are sent as absolute unix timestamps.
    """
    seconds = ttl_to_seconds(timeout)
    if seconds > MAX_RELATIVE_EXPIRE:
        return int(now if now is not None else time.time()) + seconds
    return seconds


def _encode(value: Any) -> str | bytes:
    if isinstance(value, (list, tuple)):
        return encode_list(list(value)).encode("utf-8")
    return encode_value(value)


def _decode(raw: Any) -> Any:
    if raw is None:
        return None
    if isinstance(raw, bytes):
        return decode_list(raw.decode("utf-8"))
    return typecast(raw)


class MemcachedCacheBackend(CacheBackend):
    """
    Memcached cache backend.

    Options ``username``, ``password`` and ``port`` feed location resolution;
    every other option is passed to ``bmemcached.Client``.

    Args:
        client: Pre-built ``bmemcached.Client``. Built from ``location`` when
            omitted.
    """

    name = "memcached"

    def __init__(self, client: Any = None, **kwargs: Any):
        super().__init__(**kwargs)
        client_options = dict(self.options)
        username = client_options.pop("username", None)
        password = client_options.pop("password", None)
        port = int(client_options.pop("port", DEFAULT_PORT))

        self.locations = resolve_locations(
            self.location, username=username, password=password, port=port
        )
        if client is None:
            username, password = shared_credentials(self.locations)
            logger.info(
                f"connecting memcached cache backend "
                f"{[loc.address for loc in self.locations]} auth={bool(username)}"
            )
            client = bmemcached.Client(
                [loc.address for loc in self.locations],
                username=username,
                password=password,
                **client_options,
            )
        self.client = client
        self._executor = BlockingExecutor("cacheplex-memcached")

    async def _run(self, method: str, *args: Any, **kwargs: Any) -> Any:
        return await self._executor.run(getattr(self.client, method), *args, **kwargs)

    def _expire(self, timeout: int | None) -> int:
        return expire_seconds(self.ttl(timeout))

    async def add(self, key: str, value: Any, timeout: int | None = None) -> Any:
        self.ensure_open()
        _key = self.make_key(key)
        stored = await self._run("add", _key, _encode(value), time=self._expire(timeout))
        if stored:
            return value
        return _decode(await self._run("get", _key))

    async def get(self, *keys: str) -> Any:
        self.ensure_open()
        self._require_keys(keys)
        _keys = [self.make_key(key) for key in keys]
        found = await self._run("get_multi", _keys)
        return self._collect(keys, [_decode(found.get(_key)) for _key in _keys])

    async def set(self, key: str, value: Any, timeout: int | None = None) -> Any:
        self.ensure_open()
        _key = self.make_key(key)
        logger.debug(f"set {_key}")
        await self._run("set", _key, _encode(value), time=self._expire(timeout))
        return value

    async def _step(self, key: str, method: str, delta: int, timeout: int | None) -> int:
        self.ensure_open()
        _key = self.make_key(key)
        expire = self._expire(timeout)
        # A missing key is created holding the seed: 1 for incr, 0 for decr
        seed = max(delta, 0)

        try:
            return int(
                await self._run(method, _key, 1, default=seed, time=expire)
            )
        except MemcachedException:
            # Floats, negative numbers and text are not native counters
            current = _decode(await self._run("get", _key))

        value = (current if is_number(current) else 0) + delta
        await self._run("set", _key, encode_value(value), time=expire)
        return value

    async def incr(self, key: str, timeout: int | None = None) -> int:
        return await self._step(key, "incr", 1, timeout)

    async def decr(self, key: str, timeout: int | None = None) -> int:
        return await self._step(key, "decr", -1, timeout)

    async def push(self, key: str, value: Any, timeout: int | None = None) -> list:
        self.ensure_open()
        _key = self.make_key(key)
        items = to_list(_decode(await self._run("get", _key)))
        items.append(value)

        await self._run("set", _key, _encode(items), time=self._expire(timeout))
        return items

    async def pop(
        self, key: str, value: Any = None, timeout: int | None = None
    ) -> Any:
        self.ensure_open()
        _key = self.make_key(key)
        current = _decode(await self._run("get", _key))

        if current is None:
            return None
        if not isinstance(current, list):
            raise InvalidOperation(
                f"Can not call pop on {type(current).__name__} values"
            )

        items = current
        if value is not None:
            try:
                items.remove(value)
                result = value
            except ValueError:
                result = False
        else:
            result = items.pop() if items else None

        await self._run("set", _key, _encode(items), time=self._expire(timeout))
        return result

    async def has(self, key: str) -> bool:
        self.ensure_open()
        return await self._run("get", self.make_key(key)) is not None

    async def touch(self, key: str, timeout: int | None = None) -> bool:
        self.ensure_open()
        _key = self.make_key(key)
        # Rewrite the raw value so its list flag is kept
        raw = await self._run("get", _key)
        if raw is None:
            return False
        await self._run("set", _key, raw, time=self._expire(timeout))
        return True

    async def flush(self) -> None:
        self.ensure_open()
        await self._run("flush_all")

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._run("disconnect_all")
        finally:
            self._executor.shutdown()
