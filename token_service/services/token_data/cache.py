"""
In-memory TTL cache for aggregated results.

Entries expire lazily: an expired entry is dropped when it is read.
There is no size bound and no LRU eviction.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float


class ResultCache:
    """
    Key-value store with a TTL per entry.

    Args:
        clock: Monotonic time source in seconds (injectable for tests)

    Usage:
        cache = ResultCache()
        cache.set("token-price:So111...", price, ttl=60)
        cache.get("token-price:So111...")
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() > entry.expires_at:
            del self._entries[key]
            return None

        return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store value for ttl seconds, replacing any existing entry."""
        self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
