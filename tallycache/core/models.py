"""Core data models for tallycache."""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Hashable, Optional


@dataclass
class CacheEntry:
    key: Hashable
    value: Any
    inserted_at: float
    last_accessed_at: Optional[float] = None
    access_count: int = 0

    def __post_init__(self) -> None:
        if self.last_accessed_at is None or self.last_accessed_at < self.inserted_at:
            self.last_accessed_at = self.inserted_at

    def touch(self, now: float) -> None:
        """Record one read or write at ``now``."""
        self.access_count += 1
        self.last_accessed_at = max(now, self.last_accessed_at)

    def age(self, now: float) -> float:
        return now - self.inserted_at


@dataclass(frozen=True)
class EntrySnapshot:
    key: Hashable
    access_count: int
    last_accessed_at: float
    age: float

    @classmethod
    def from_entry(cls, entry: CacheEntry, now: float) -> "EntrySnapshot":
        return cls(
            key=entry.key,
            access_count=entry.access_count,
            last_accessed_at=entry.last_accessed_at,
            age=entry.age(now),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class CacheStats:
    size: int
    max_size: int
    ttl: Optional[float]
    entries: list[EntrySnapshot] = field(default_factory=list)

    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["entries"] = [snap.to_dict() for snap in self.entries]
        payload["hit_rate"] = round(self.hit_rate, 4)
        return payload
