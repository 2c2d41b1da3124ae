"""Base types shared by the cache backends."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass
class CacheStats:
    """Statistics for cache performance monitoring."""

    hits: int = 0
    misses: int = 0
    errors: int = 0
    evictions: int = 0

    @property
    def total_requests(self) -> int:
        """Total number of cache requests."""
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        if self.total_requests == 0:
            return 0.0
        return self.hits / self.total_requests

    def record_hit(self) -> None:
        """Record a cache hit."""
        self.hits += 1

    def record_miss(self) -> None:
        """Record a cache miss."""
        self.misses += 1

    def record_error(self) -> None:
        """Record a backend error."""
        self.errors += 1

    def record_eviction(self, count: int = 1) -> None:
        """Record entries dropped for capacity or expiry."""
        self.evictions += count

    def reset(self) -> None:
        """Reset all statistics."""
        self.hits = 0
        self.misses = 0
        self.errors = 0
        self.evictions = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "evictions": self.evictions,
            "hit_rate": round(self.hit_rate, 4),
        }


class LookupStatus(Enum):
    """Outcome of a backend read."""
    HIT = "hit"
    MISS = "miss"
    ERROR = "error"


@dataclass(frozen=True)
class CacheLookup:
    """Result of a backend read.

    A stored ``None`` comes back as a HIT whose value is ``None``; only
    ``MISS`` and ``ERROR`` mean there is nothing to return.
    """

    status: LookupStatus
    value: Any = None

    @property
    def hit(self) -> bool:
        return self.status is LookupStatus.HIT

    @classmethod
    def found(cls, value: Any) -> "CacheLookup":
        return cls(LookupStatus.HIT, value)

    @classmethod
    def miss(cls) -> "CacheLookup":
        return _MISS

    @classmethod
    def error(cls) -> "CacheLookup":
        return _ERROR


_MISS = CacheLookup(LookupStatus.MISS)
_ERROR = CacheLookup(LookupStatus.ERROR)


class ICacheBackend(ABC):
    """Abstract base class for distributed cache backends.

    Implementations must never raise from their data operations: every
    connection, timeout or decoding failure is reported through the return
    value (``CacheLookup.error()``, ``False``, ``None``) so the facade can
    fall back to the local store.
    """

    @property
    @abstractmethod
    def configured(self) -> bool:
        """Whether an endpoint was provided at all."""
        ...

    @property
    @abstractmethod
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        ...

    @abstractmethod
    async def connect(self) -> bool:
        """Connect to the backend.

        Returns:
            True if a usable connection exists afterwards.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Safe to call when never connected."""
        ...

    @abstractmethod
    async def is_available(self) -> bool:
        """Attempt a connection if needed and report whether it succeeded."""
        ...

    @abstractmethod
    async def get(self, key: str) -> CacheLookup:
        """Get a decoded value from the backend."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: float) -> bool:
        """Store a value with a TTL in seconds.

        Returns:
            True if the write reached the backend.
        """
        ...

    @abstractmethod
    async def delete(self, key: str) -> Optional[bool]:
        """Delete a key.

        Returns:
            True if the key existed and was deleted, False if it was absent,
            None if the backend could not be reached.
        """
        ...

    @abstractmethod
    async def keys_by_prefix(self, prefix: str) -> Optional[List[str]]:
        """List keys starting with ``prefix`` in sorted order.

        Returns:
            The keys, or None if the listing failed.
        """
        ...

    @abstractmethod
    async def delete_many(self, keys: List[str]) -> int:
        """Delete several keys in one round-trip.

        Returns:
            Number of keys deleted (0 on failure).
        """
        ...
