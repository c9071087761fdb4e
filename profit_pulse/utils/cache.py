from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    stored_at: float


class TTLCache(Generic[T]):
    """
    In-memory cache whose entries expire `ttl_seconds` after they are stored.

    Each component owns its own instance; nothing is shared at module level.
    """

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry[T]] = {}

    def _is_fresh(self, entry: CacheEntry[T]) -> bool:
        return self._clock() - entry.stored_at < self.ttl_seconds

    def get(self, key: Hashable) -> T | None:
        """
        Return cached value if it exists and is not expired.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        # expired entries are evicted on read
        if not self._is_fresh(entry):
            del self._entries[key]
            return None

        return entry.value

    def set(self, key: Hashable, value: T) -> CacheEntry[T]:
        """
        Store value with the current timestamp.
        """
        entry = CacheEntry(value=value, stored_at=self._clock())
        self._entries[key] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
