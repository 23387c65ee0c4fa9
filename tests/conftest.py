"""Shared fixtures for the tallycache test suite."""

from __future__ import annotations

import pytest

from tallycache.core.manager import CacheManager


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def make_cache(clock: FakeClock):
    """Factory for caches driven by the fake clock."""

    def _make(max_size: int = 8, ttl=None, **kwargs) -> CacheManager:
        kwargs.setdefault("clock", clock)
        return CacheManager(max_size, ttl, **kwargs)

    return _make
