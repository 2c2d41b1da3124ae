"""In-process LRU cache backend with per-entry expiration."""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, List

from memecache.services.cache.backends.base import CacheLookup, CacheStats


@dataclass
class CacheEntry:
    """A cache entry with an absolute expiration time."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if the entry has expired."""
        return now > self.expires_at


class MemoryBackend:
    """Bounded in-memory cache with LRU eviction.

    This is the fallback of record: the facade always writes here, and reads
    land here whenever Redis is unconfigured, unreachable or misses.

    Features:
    - Capacity bound; the least recently used entry is evicted when full
    - Independent TTL per entry, checked lazily on read
    - Thread-safe via a single lock; no operation awaits

    Values are stored as given. The facade hands over JSON text, so callers
    never share mutable state with the store.
    """

    def __init__(
        self,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize memory backend.

        Args:
            max_entries: Maximum number of entries kept.
            clock: Monotonic time source in seconds (injectable for tests).
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._stats = CacheStats()

    @property
    def max_entries(self) -> int:
        return self._max_entries

    @property
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    def get(self, key: str) -> CacheLookup:
        """Get a value; expired entries are purged and reported as a miss."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats.record_miss()
                return CacheLookup.miss()

            if entry.is_expired(self._clock()):
                del self._entries[key]
                self._stats.record_eviction()
                self._stats.record_miss()
                return CacheLookup.miss()

            self._entries.move_to_end(key)
            self._stats.record_hit()
            return CacheLookup.found(entry.value)

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Insert or replace a value, evicting if at capacity."""
        with self._lock:
            now = self._clock()
            if key in self._entries:
                self._entries.move_to_end(key)
            elif len(self._entries) >= self._max_entries:
                self._make_room(now)

            self._entries[key] = CacheEntry(value=value, expires_at=now + ttl)

    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if a live entry was removed."""
        with self._lock:
            entry = self._entries.pop(key, None)
            if entry is None:
                return False
            return not entry.is_expired(self._clock())

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def keys(self) -> List[str]:
        """Live keys, least recently used first."""
        with self._lock:
            self._purge_expired(self._clock())
            return list(self._entries.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not entry.is_expired(self._clock())

    # Internal helpers; callers must hold the lock.

    def _purge_expired(self, now: float) -> int:
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            self._stats.record_eviction(len(expired))
        return len(expired)

    def _make_room(self, now: float) -> None:
        self._purge_expired(now)
        while len(self._entries) >= self._max_entries:
            self._entries.popitem(last=False)
            self._stats.record_eviction()
