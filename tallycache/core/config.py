"""Construction-time configuration for cache instances."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Optional, Union

TTLLike = Union[float, int, timedelta, None]

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class ConfigurationError(ValueError):
    """Raised when a cache is constructed with invalid settings."""


def normalize_ttl(ttl: TTLLike) -> Optional[float]:
    """Return ``ttl`` as float seconds, or None when entries never expire."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        seconds = ttl.total_seconds()
    elif isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
        raise ConfigurationError(f"ttl must be seconds or a timedelta, got {ttl!r}")
    else:
        seconds = float(ttl)
    if seconds < 0:
        raise ConfigurationError(f"ttl must not be negative, got {seconds}")
    return seconds or None


@dataclass(frozen=True)
class CacheConfig:
    """Validated, immutable cache settings.

    Args:
        max_size: Maximum number of live entries. Must be a positive int.
        ttl: Entry lifetime in seconds or as a timedelta; None or 0 disables expiry.
        sliding_ttl: Measure the lifetime from the last access instead of insertion.
        copy_values: Deep-copy values on the way in and out of the cache.
    """

    max_size: int
    ttl: Optional[float] = None
    sliding_ttl: bool = False
    copy_values: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.max_size, bool) or not isinstance(self.max_size, int):
            raise ConfigurationError(f"max_size must be an int, got {self.max_size!r}")
        if self.max_size <= 0:
            raise ConfigurationError(f"max_size must be positive, got {self.max_size}")
        object.__setattr__(self, "ttl", normalize_ttl(self.ttl))

    @classmethod
    def from_env(cls, prefix: str = "TALLYCACHE_", **overrides: Any) -> "CacheConfig":
        """Build a config from ``<prefix>MAX_SIZE`` style environment variables.

        Keyword overrides take precedence over the environment.
        """
        values: dict[str, Any] = {}

        raw_size = os.getenv(f"{prefix}MAX_SIZE", "").strip()
        if raw_size:
            values["max_size"] = _parse_int(f"{prefix}MAX_SIZE", raw_size)

        raw_ttl = os.getenv(f"{prefix}TTL", "").strip()
        if raw_ttl:
            values["ttl"] = _parse_float(f"{prefix}TTL", raw_ttl)

        for name in ("sliding_ttl", "copy_values"):
            env_name = f"{prefix}{name.upper()}"
            raw = os.getenv(env_name)
            if raw is not None:
                values[name] = _parse_bool(env_name, raw)

        values.update(overrides)
        if "max_size" not in values:
            raise ConfigurationError(f"{prefix}MAX_SIZE is not set")
        return cls(**values)


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


def _parse_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}")
