"""tallycache: bounded in-memory cache with least-used eviction."""

from .core import (
    CacheConfig,
    CacheManager,
    CacheStats,
    ConfigurationError,
    EntrySnapshot,
    make_key,
    memoize,
)
from .core.logging_config import configure_logging

configure_logging()

__all__ = [
    "CacheManager",
    "CacheConfig",
    "CacheStats",
    "ConfigurationError",
    "EntrySnapshot",
    "configure_logging",
    "make_key",
    "memoize",
]
__version__ = "0.1.0"
