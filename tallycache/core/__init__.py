from .config import CacheConfig, ConfigurationError
from .manager import CacheManager, least_used
from .memoize import make_key, memoize
from .models import CacheEntry, CacheStats, EntrySnapshot

__all__ = [
    "CacheManager",
    "CacheConfig",
    "ConfigurationError",
    "CacheEntry",
    "CacheStats",
    "EntrySnapshot",
    "least_used",
    "make_key",
    "memoize",
]
