"""Raw key/entry storage with no expiry or capacity policy."""

from __future__ import annotations

from typing import Hashable, Iterator, Optional

from .models import CacheEntry


class EntryStore:
    """Dict-backed store for :class:`CacheEntry` objects.

    Callers above this layer decide whether an entry is still valid; the
    store hands back whatever it holds.
    """

    def __init__(self) -> None:
        self._data: dict[Hashable, CacheEntry] = {}

    def put(self, key: Hashable, entry: CacheEntry) -> None:
        self._data[key] = entry

    def get(self, key: Hashable) -> Optional[CacheEntry]:
        return self._data.get(key)

    def remove(self, key: Hashable) -> Optional[CacheEntry]:
        return self._data.pop(key, None)

    def iterate(self) -> Iterator[tuple[Hashable, CacheEntry]]:
        """Yield ``(key, entry)`` pairs from a snapshot of the current items.

        Removing keys while consuming the generator is safe.
        """
        for key, entry in list(self._data.items()):
            yield key, entry

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._data
