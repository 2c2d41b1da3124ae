"""Cache facade unifying the local store and Redis.

Reads consult Redis first when it is configured and fall back to the local
store on any miss or failure. Writes always land in the local store and are
mirrored to Redis on a best-effort basis. A key whose Redis write or delete
failed is served from the local store only until a later Redis write or
delete for it succeeds, so a reconnect never resurrects an older value. Backend faults never escape this
class; only caller mistakes (unserializable values, bad TTLs) are raised.

Usage:
    cache = CacheService.from_settings(settings)

    await cache.set("cache:captions:funny_cats", ["a", "b"], ttl=300)
    captions = await cache.get("cache:captions:funny_cats")

    value = await cache.get(key, MISSING)
    if value is MISSING:
        ...  # compute and store

    await cache.close()
"""

import math
from numbers import Real
from typing import Any, Dict, Optional, Set

from memecache.core import config
from memecache.core.config import Settings
from memecache.core.errors import InvalidTTLError
from memecache.core.logging import get_logger
from memecache.services.cache import serialization
from memecache.services.cache.backends.base import ICacheBackend
from memecache.services.cache.backends.memory_backend import MemoryBackend
from memecache.services.cache.backends.redis_backend import RedisBackend
from memecache.services.cache.key_generator import CacheKeyGenerator

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300


class _Missing:
    """Sentinel type for absent cache entries."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


class CacheService:
    """Two-tier cache facade (Redis in front of an in-process LRU store)."""

    def __init__(
        self,
        local: Optional[MemoryBackend] = None,
        remote: Optional[ICacheBackend] = None,
        default_ttl: float = DEFAULT_TTL_SECONDS,
    ):
        """Initialize the cache service.

        Args:
            local: In-process store; a default-sized one is created if omitted.
            remote: Distributed backend, or None for local-only caching.
            default_ttl: TTL in seconds used when ``set`` gets none.
        """
        self.local = local if local is not None else MemoryBackend()
        self.remote = remote
        self.default_ttl = self._validate_ttl(default_ttl)
        # Keys whose Redis copy may be older than the local one
        self._unsynced: Set[str] = set()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "CacheService":
        """Build the service from application settings."""
        settings = settings or config.settings
        remote = RedisBackend.from_settings(settings) if settings.redis_configured else None
        if remote is None:
            logger.info("Redis URL not configured, using local cache only")
        return cls(
            local=MemoryBackend(max_entries=settings.local_cache_max_entries),
            remote=remote,
            default_ttl=settings.cache_default_ttl,
        )

    @property
    def redis_configured(self) -> bool:
        return self.remote is not None and self.remote.configured

    async def __aenter__(self) -> "CacheService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================================
    # Core operations
    # =========================================================================

    async def get(self, key: str, default: Any = None) -> Any:
        """Get a value, returning ``default`` when neither store has it.

        A stored ``None`` is returned as ``None``; pass ``MISSING`` as the
        default to tell it apart from an absent key.
        """
        if self.redis_configured and key not in self._unsynced:
            lookup = await self.remote.get(key)
            if lookup.hit:
                logger.debug("Redis cache hit", key=key)
                return lookup.value

        lookup = self.local.get(key)
        if lookup.hit:
            logger.debug("Local cache hit", key=key)
            return serialization.decode(lookup.value)

        logger.debug("Cache miss", key=key)
        return default

    async def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store a value in both tiers.

        Raises:
            CacheSerializationError: If ``value`` is not JSON-serializable.
            InvalidTTLError: If ``ttl`` is not a positive number.
        """
        ttl = self.default_ttl if ttl is None else self._validate_ttl(ttl, key)
        payload = serialization.encode(value, key=key)

        self.local.set(key, payload, ttl)

        if self.redis_configured:
            if await self.remote.set(key, value, ttl):
                self._unsynced.discard(key)
            else:
                self._unsynced.add(key)
                logger.warning(f"Failed to set cache in Redis for key: {key}")

    async def delete(self, key: str) -> bool:
        """Delete a key from both tiers; True if either held it."""
        remote_deleted = False
        if self.redis_configured:
            result = await self.remote.delete(key)
            if result is None:
                self._unsynced.add(key)
                logger.warning(f"Failed to delete cache in Redis for key: {key}")
            else:
                self._unsynced.discard(key)
                remote_deleted = result

        local_deleted = self.local.delete(key)
        return remote_deleted or local_deleted

    async def exists(self, key: str) -> bool:
        """Check whether a live value is stored under ``key``."""
        return await self.get(key, MISSING) is not MISSING

    async def clear(self, namespace: Optional[str] = None) -> int:
        """Remove cached entries.

        Without a namespace every ``cache:*`` key is removed from Redis and
        the whole local store is flushed. With a namespace only keys under
        ``cache:<namespace>:`` are removed from either tier.

        Returns:
            Number of Redis keys deleted.
        """
        prefix = CacheKeyGenerator.pattern(namespace)
        deleted = 0

        if self.redis_configured:
            keys = await self.remote.keys_by_prefix(prefix)
            if keys is None:
                logger.warning(f"Redis cache clear skipped, could not list keys under {prefix}")
            else:
                if keys:
                    deleted = await self.remote.delete_many(keys)
                # A short count may hide a failed DEL; those keys stay unsynced
                if deleted == len(keys):
                    self._unsynced = {key for key in self._unsynced if not key.startswith(prefix)}

        if namespace is None:
            self.local.clear()
        else:
            for key in self.local.keys():
                if key.startswith(prefix):
                    self.local.delete(key)

        logger.info("Cache cleared", namespace=namespace, redis_keys_deleted=deleted)
        return deleted

    # =========================================================================
    # Health & lifecycle
    # =========================================================================

    async def is_redis_available(self) -> bool:
        """Report Redis reachability; False without trying when unconfigured."""
        if not self.redis_configured:
            return False
        return await self.remote.is_available()

    async def close(self) -> None:
        """Close the Redis connection. Safe to call repeatedly."""
        if self.remote is not None:
            await self.remote.close()

    def stats(self) -> Dict[str, Any]:
        """Snapshot of both tiers for health checks and the admin CLI."""
        snapshot: Dict[str, Any] = {
            "local": {
                "entries": len(self.local),
                "max_entries": self.local.max_entries,
                **self.local.stats.to_dict(),
            },
            "redis": {"configured": self.redis_configured},
        }
        if self.remote is not None:
            snapshot["redis"].update(self.remote.stats.to_dict())
            snapshot["redis"]["unsynced_keys"] = len(self._unsynced)
            state = getattr(self.remote, "state", None)
            if state is not None:
                snapshot["redis"]["state"] = state.value
        return snapshot

    @staticmethod
    def _validate_ttl(ttl: Any, key: Optional[str] = None) -> float:
        if isinstance(ttl, bool) or not isinstance(ttl, Real) or not (ttl > 0 and math.isfinite(ttl)):
            raise InvalidTTLError(ttl, key=key)
        return ttl
