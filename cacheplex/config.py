"""Configuration system for cacheplex."""

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from .utils import DEFAULT_PREFIX, DEFAULT_SEPARATOR, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

DEFAULT_CACHES: dict[str, dict[str, Any]] = {"default": {"backend": "memory"}}


@dataclass
class CacheSettings:
    """Settings for one named cache."""

    backend: str | Callable[..., Any] = "memory"
    location: Any = None
    prefix: str | None = DEFAULT_PREFIX
    separator: str = DEFAULT_SEPARATOR
    timeout: int = DEFAULT_TIMEOUT
    default: bool = False
    key_fn: Callable[[str], str] | None = None
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CacheSettings":
        """Build settings from a plain mapping. Unknown keys go into options."""
        known = {f.name for f in fields(cls)}
        kwargs = {key: value for key, value in data.items() if key in known}
        extra = {key: value for key, value in data.items() if key not in known}
        options = {**extra, **dict(kwargs.pop("options", None) or {})}
        return cls(**kwargs, options=options)

    def backend_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for constructing the backend."""
        return {
            "location": self.location,
            "prefix": self.prefix,
            "separator": self.separator,
            "timeout": self.timeout,
            "key_fn": self.key_fn,
            "options": dict(self.options),
        }


@dataclass
class CacheConfig:
    """Process-wide configuration: the set of named caches."""

    caches: dict[str, Any] = field(
        default_factory=lambda: {name: dict(cfg) for name, cfg in DEFAULT_CACHES.items()}
    )
    debug: bool = False

    # Internal
    _registry: Any = field(default=None, init=False, repr=False)

    def __post_init__(self):
        """Load overrides for the default cache from environment variables."""
        self.debug = self._get_bool_env("CACHEPLEX_DEBUG", self.debug)

        overrides: dict[str, Any] = {}
        backend = os.getenv("CACHEPLEX_BACKEND")
        if backend:
            overrides["backend"] = backend
        location = os.getenv("CACHEPLEX_LOCATION")
        if location:
            overrides["location"] = location
        prefix = os.getenv("CACHEPLEX_PREFIX")
        if prefix is not None:
            overrides["prefix"] = prefix
        timeout = self._get_int_env("CACHEPLEX_TIMEOUT", None)
        if timeout is not None:
            overrides["timeout"] = timeout

        if overrides:
            default = self.caches.get("default")
            if isinstance(default, CacheSettings):
                for key, value in overrides.items():
                    setattr(default, key, value)
            else:
                self.caches["default"] = {**(default or {}), **overrides}

        if self.debug:
            logging.getLogger("cacheplex").setLevel(logging.DEBUG)

    def _get_bool_env(self, key: str, default: bool) -> bool:
        """Get boolean value from environment variable."""
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("true", "1", "yes", "on")

    def _get_int_env(self, key: str, default: int | None) -> int | None:
        """Get integer value from environment variable."""
        value = os.getenv(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default

    def get_registry(self):
        """Get or create the cache registry for the configured caches."""
        if self._registry is None:
            from .registry import CacheRegistry

            self._registry = CacheRegistry(self.caches)
        return self._registry

    def reset_registry(self) -> None:
        """Drop the registry instance (useful for testing)."""
        self._registry = None


def memcached_env() -> dict[str, str | None]:
    """Server list and credentials for memcached from the environment."""
    return {
        "servers": os.getenv("MEMCACHIER_SERVERS") or "localhost",
        "username": os.getenv("MEMCACHIER_USERNAME"),
        "password": os.getenv("MEMCACHIER_PASSWORD"),
    }


# Global configuration instance
_config = CacheConfig()


def configure(**kwargs: Any) -> None:
    """
    Update global cache configuration.

    Changing ``caches`` drops the current registry. Its backends are not
    closed here; ``await cacheplex.close_all()`` first to release their
    connections. A warning is logged when open backends are dropped.
    """
    for key, value in kwargs.items():
        if key.startswith("_") or not hasattr(_config, key):
            raise ValueError(f"Unknown configuration key: {key}")
        setattr(_config, key, value)

    if kwargs.get("debug"):
        logging.getLogger("cacheplex").setLevel(logging.DEBUG)

    # Rebuild the registry if the cache definitions changed
    if "caches" in kwargs:
        registry = _config._registry
        if registry is not None and registry.open_backends():
            logger.warning(
                "Replacing the cache registry while backends are still open; "
                "await close_all() before configure(caches=...) to release them"
            )
        _config.reset_registry()


def get_config() -> CacheConfig:
    """Get current global configuration."""
    return _config


def reset_config() -> None:
    """Reset configuration to defaults (useful for testing)."""
    global _config  # noqa: PLW0603
    _config = CacheConfig()
