"""Cache backend implementations.

Provides the two storage tiers behind the cache facade:
- MemoryBackend: bounded in-process LRU store, always present
- RedisBackend: optional distributed store
"""

from memecache.services.cache.backends.base import (
    CacheLookup,
    CacheStats,
    ICacheBackend,
    LookupStatus,
)
from memecache.services.cache.backends.memory_backend import MemoryBackend
from memecache.services.cache.backends.redis_backend import ConnectionState, RedisBackend

__all__ = [
    "CacheLookup",
    "CacheStats",
    "ConnectionState",
    "ICacheBackend",
    "LookupStatus",
    "MemoryBackend",
    "RedisBackend",
]
