"""Memoization decorator backed by a :class:`CacheManager`."""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any, Callable, Hashable, Optional, TypeVar

if TYPE_CHECKING:
    from .manager import CacheManager

logger = logging.getLogger("tallycache.memoize")

_F = TypeVar("_F", bound=Callable[..., Any])

_MISSING = object()


def _normalize(value: Any) -> Hashable:
    """Turn ``value`` into a hashable ``(type, payload)`` pair.

    The type tag keeps ``1``, ``1.0``, ``True`` and ``"1"`` apart even though
    some of them compare equal.
    """
    kind = type(value)
    if isinstance(value, (list, tuple)):
        return kind, tuple(_normalize(v) for v in value)
    if isinstance(value, dict):
        items = [(_normalize(k), _normalize(v)) for k, v in value.items()]
        items.sort(key=lambda kv: repr(kv[0]))
        return kind, tuple(items)
    if isinstance(value, (set, frozenset)):
        return kind, frozenset(_normalize(v) for v in value)
    try:
        hash(value)
    except TypeError:
        raise TypeError(
            f"cannot build a cache key from unhashable {kind.__name__!r}; "
            "pass key= to memoize() to derive one yourself"
        ) from None
    return kind, value


def make_key(args: tuple[Any, ...], kwargs: dict[str, Any]) -> tuple:
    """Canonical key for a call: positional order kept, keyword order ignored."""
    positional = tuple(_normalize(a) for a in args)
    named = tuple(sorted((name, _normalize(v)) for name, v in kwargs.items()))
    return positional, named


def memoize(
    cache: "CacheManager",
    func: Optional[Callable[..., Any]] = None,
    *,
    key: Optional[Callable[..., Hashable]] = None,
) -> Any:
    """Cache results of a deterministic function in ``cache``.

    Usable as ``@memoize(cache)`` or ``memoize(cache, func)``. Results are
    stored under ``(module, qualname, id(func), key(*args, **kwargs))`` so
    several functions, including same-named closures and lambdas, can share
    one cache. ``None`` results are cached; exceptions
    propagate and store nothing.

    Eviction and expiry come from ``cache`` alone: a small cache may forget
    results and recompute them later.

    Recursive functions only memoize their inner calls when those calls go
    through the wrapper. The decorator form handles this because it rebinds
    the function's name; with ``memoize(cache, func)`` assign the result back
    to the name ``func`` calls itself by.

    Args:
        cache: Cache instance that holds the results.
        func: Function to wrap; omit to get a decorator.
        key: Custom ``(*args, **kwargs) -> hashable`` key derivation.
    """

    def decorator(fn: _F) -> _F:
        derive = key or (lambda *args, **kwargs: make_key(args, kwargs))
        prefix = (fn.__module__, fn.__qualname__, id(fn))

        def cache_key(*args: Any, **kwargs: Any) -> tuple:
            return prefix + (derive(*args, **kwargs),)

        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            k = cache_key(*args, **kwargs)
            result = cache.get(k, _MISSING)
            if result is not _MISSING:
                return result
            logger.debug("%s cache miss", fn.__qualname__)
            result = fn(*args, **kwargs)
            cache.set(k, result)
            return result

        wrapper.cache = cache  # type: ignore[attr-defined]
        wrapper.cache_key = cache_key  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]

    if func is not None:
        return decorator(func)
    return decorator
