"""Redis cache backend implementation."""

import asyncio
import time
from enum import Enum
from typing import Any, Callable, List, Optional

import redis.asyncio as redis

from memecache.core.config import Settings
from memecache.core.errors import BackendUnavailableError, CacheSerializationError
from memecache.core.logging import get_logger
from memecache.services.cache import serialization
from memecache.services.cache.backends.base import CacheLookup, CacheStats, ICacheBackend

logger = get_logger(__name__)

# Keys deleted per DEL command during bulk deletes
DELETE_BATCH_SIZE = 500

_GLOB_SPECIALS = "\\*?[]"


class ConnectionState(Enum):
    """Lifecycle of the shared Redis connection."""
    UNCONFIGURED = "unconfigured"
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


def _escape_glob(prefix: str) -> str:
    return "".join(f"\\{char}" if char in _GLOB_SPECIALS else char for char in prefix)


class RedisBackend(ICacheBackend):
    """Redis-based distributed cache backend.

    - Lazy, memoized connection verified with PING
    - JSON serialization of values, decode failures read as misses
    - Every Redis fault is contained and reported through return values
    - After a failure the client is dropped; the first call made once
      ``reconnect_interval`` seconds have passed tries a fresh connection
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        connect_timeout: float = 2.0,
        socket_timeout: float = 2.0,
        reconnect_interval: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize Redis backend.

        Args:
            redis_url: Redis connection URL. None disables the backend.
            connect_timeout: Seconds allowed to open a connection.
            socket_timeout: Seconds allowed per command.
            reconnect_interval: Seconds to wait after a failure before the
                next connection attempt.
            clock: Monotonic time source (injectable for tests).
        """
        self._redis_url = redis_url or None
        self._connect_timeout = connect_timeout
        self._socket_timeout = socket_timeout
        self._reconnect_interval = reconnect_interval
        self._clock = clock
        self._client: Optional[redis.Redis] = None
        self._connect_lock = asyncio.Lock()
        self._last_failure_at: Optional[float] = None
        self._stats = CacheStats()
        self._state = ConnectionState.IDLE if self._redis_url else ConnectionState.UNCONFIGURED

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisBackend":
        return cls(
            redis_url=settings.redis_url,
            connect_timeout=settings.redis_connect_timeout,
            socket_timeout=settings.redis_socket_timeout,
            reconnect_interval=settings.redis_reconnect_interval,
        )

    @property
    def configured(self) -> bool:
        return self._redis_url is not None

    @property
    def connected(self) -> bool:
        return self._client is not None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def stats(self) -> CacheStats:
        """Get cache statistics."""
        return self._stats

    # =========================================================================
    # Connection lifecycle
    # =========================================================================

    async def connect(self) -> bool:
        """Connect to Redis, reusing an existing connection."""
        if not self.configured:
            return False
        if self._client is not None:
            return True

        async with self._connect_lock:
            if self._client is not None:
                return True

            self._state = ConnectionState.CONNECTING
            client = None
            try:
                client = redis.from_url(
                    self._redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                    socket_connect_timeout=self._connect_timeout,
                    socket_timeout=self._socket_timeout,
                )
                await client.ping()
            except Exception as e:
                logger.warning(f"Failed to connect to Redis cache: {e}")
                if client is not None:
                    await self._close_quietly(client)
                self._mark_failed()
                return False

            self._client = client
            self._state = ConnectionState.CONNECTED
            self._last_failure_at = None
            logger.info("Connected to Redis cache")
            return True

    async def close(self) -> None:
        """Disconnect from Redis."""
        client, self._client = self._client, None
        if self.configured:
            self._state = ConnectionState.IDLE
        self._last_failure_at = None
        if client is not None:
            await self._close_quietly(client)
            logger.info("Disconnected from Redis cache")

    async def is_available(self) -> bool:
        """Check Redis reachability, connecting if needed."""
        if not self.configured:
            return False

        client = self._client
        if client is None:
            return await self.connect()

        try:
            await client.ping()
            return True
        except Exception as e:
            await self._handle_failure("PING", None, e, client)
            return False

    async def _client_or_raise(self, operation: str) -> redis.Redis:
        if not self.configured:
            raise BackendUnavailableError("Redis URL not configured", operation=operation)

        if self._client is None:
            if self._in_cooldown():
                raise BackendUnavailableError("Redis reconnect interval not elapsed", operation=operation)
            if not await self.connect():
                raise BackendUnavailableError(operation=operation)

        return self._client

    def _in_cooldown(self) -> bool:
        if self._state is not ConnectionState.DISCONNECTED or self._last_failure_at is None:
            return False
        return self._clock() - self._last_failure_at < self._reconnect_interval

    def _mark_failed(self) -> None:
        self._state = ConnectionState.DISCONNECTED
        self._last_failure_at = self._clock()

    async def _handle_failure(
        self,
        operation: str,
        key: Optional[str],
        error: Exception,
        client: redis.Redis,
    ) -> None:
        target = f" for key {key}" if key is not None else ""
        logger.warning(f"Redis {operation} error{target}: {error}")
        self._stats.record_error()

        # Only drop the client that actually failed; a concurrent caller may
        # already have reconnected.
        if self._client is client:
            self._client = None
            self._mark_failed()
            await self._close_quietly(client)

    @staticmethod
    async def _close_quietly(client: redis.Redis) -> None:
        try:
            await client.aclose()
        except Exception as e:
            logger.debug(f"Error closing Redis client: {e}")

    # =========================================================================
    # Data operations
    # =========================================================================

    async def get(self, key: str) -> CacheLookup:
        """Get a value from Redis."""
        try:
            client = await self._client_or_raise("GET")
        except BackendUnavailableError:
            return CacheLookup.error()

        try:
            raw = await client.get(key)
        except Exception as e:
            await self._handle_failure("GET", key, e, client)
            return CacheLookup.error()

        if raw is None:
            self._stats.record_miss()
            return CacheLookup.miss()

        try:
            value = serialization.decode(raw)
        except (ValueError, TypeError) as e:
            logger.warning(f"Undecodable Redis payload for key {key}: {e}")
            self._stats.record_error()
            self._stats.record_miss()
            return CacheLookup.miss()

        self._stats.record_hit()
        return CacheLookup.found(value)

    async def set(self, key: str, value: Any, ttl: float) -> bool:
        """Set a value in Redis with a millisecond-precision expiry."""
        try:
            payload = serialization.encode(value, key=key)
        except CacheSerializationError as e:
            logger.warning(f"Skipping Redis SET for key {key}: {e.message}")
            return False

        try:
            client = await self._client_or_raise("SET")
        except BackendUnavailableError:
            return False

        try:
            await client.set(key, payload, px=max(1, int(ttl * 1000)))
            return True
        except Exception as e:
            await self._handle_failure("SET", key, e, client)
            return False

    async def delete(self, key: str) -> Optional[bool]:
        """Delete a key from Redis; None when Redis could not be reached."""
        try:
            client = await self._client_or_raise("DELETE")
        except BackendUnavailableError:
            return None

        try:
            result = await client.delete(key)
            return result > 0
        except Exception as e:
            await self._handle_failure("DELETE", key, e, client)
            return None

    async def keys_by_prefix(self, prefix: str) -> Optional[List[str]]:
        """List keys under a prefix using SCAN."""
        try:
            client = await self._client_or_raise("SCAN")
        except BackendUnavailableError:
            return None

        pattern = f"{_escape_glob(prefix)}*"
        try:
            keys = [key async for key in client.scan_iter(match=pattern, count=DELETE_BATCH_SIZE)]
        except Exception as e:
            await self._handle_failure("SCAN", pattern, e, client)
            return None

        return sorted(set(keys))

    async def delete_many(self, keys: List[str]) -> int:
        """Delete keys in batches of DEL commands."""
        if not keys:
            return 0

        try:
            client = await self._client_or_raise("DELETE")
        except BackendUnavailableError:
            return 0

        deleted = 0
        try:
            for start in range(0, len(keys), DELETE_BATCH_SIZE):
                deleted += await client.delete(*keys[start:start + DELETE_BATCH_SIZE])
        except Exception as e:
            await self._handle_failure("DELETE", None, e, client)
        return deleted
