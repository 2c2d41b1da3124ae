"""Shared test fixtures for the meme cache tests."""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from memecache.services.cache.backends import redis_backend as redis_backend_module
from memecache.services.cache.backends.base import CacheLookup, CacheStats, ICacheBackend
from memecache.services.cache.backends.memory_backend import MemoryBackend
from memecache.services.cache.cache_service import CacheService


# ============================================================================
# Helpers
# ============================================================================

class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRemoteBackend(ICacheBackend):
    """Dict-backed distributed backend with switchable failures."""

    def __init__(self):
        self.storage: Dict[str, str] = {}
        self.ttls: Dict[str, float] = {}
        self.fail_reads = False
        self.fail_writes = False
        self.fail_listing = False
        self.reachable = True
        self.closed = 0
        self._stats = CacheStats()

    @property
    def configured(self) -> bool:
        return True

    @property
    def stats(self) -> CacheStats:
        return self._stats

    async def connect(self) -> bool:
        return self.reachable

    async def close(self) -> None:
        self.closed += 1

    async def is_available(self) -> bool:
        return self.reachable

    async def get(self, key: str) -> CacheLookup:
        if self.fail_reads or not self.reachable:
            self._stats.record_error()
            return CacheLookup.error()
        if key not in self.storage:
            self._stats.record_miss()
            return CacheLookup.miss()
        self._stats.record_hit()
        return CacheLookup.found(json.loads(self.storage[key]))

    async def set(self, key: str, value: Any, ttl: float) -> bool:
        if self.fail_writes or not self.reachable:
            self._stats.record_error()
            return False
        self.storage[key] = json.dumps(value)
        self.ttls[key] = ttl
        return True

    async def delete(self, key: str) -> Optional[bool]:
        if self.fail_writes or not self.reachable:
            return None
        return self.storage.pop(key, None) is not None

    async def keys_by_prefix(self, prefix: str) -> Optional[List[str]]:
        if self.fail_listing or not self.reachable:
            return None
        return sorted(key for key in self.storage if key.startswith(prefix))

    async def delete_many(self, keys: List[str]) -> int:
        if self.fail_writes or not self.reachable:
            return 0
        return sum(1 for key in keys if self.storage.pop(key, None) is not None)


async def async_iter(items):
    for item in items:
        yield item


def make_redis_client(**overrides) -> MagicMock:
    """Create a mock redis.asyncio client with async command methods."""
    client = MagicMock()
    client.ping = AsyncMock(return_value=True)
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=0)
    client.aclose = AsyncMock(return_value=None)
    client.scan_iter = MagicMock(side_effect=lambda **kwargs: async_iter([]))
    for name, value in overrides.items():
        setattr(client, name, value)
    return client


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def clock():
    """A fake monotonic clock."""
    return FakeClock()


@pytest.fixture
def memory_backend(clock):
    """A small memory backend driven by the fake clock."""
    return MemoryBackend(max_entries=3, clock=clock)


@pytest.fixture
async def local_cache():
    """A local-only cache service."""
    cache = CacheService()
    yield cache
    await cache.close()


@pytest.fixture
def fake_remote():
    """A fake distributed backend."""
    return FakeRemoteBackend()


@pytest.fixture
async def layered_cache(fake_remote):
    """A cache service fronted by the fake distributed backend."""
    cache = CacheService(remote=fake_remote)
    yield cache
    await cache.close()


@pytest.fixture
def redis_from_url():
    """Patch redis.asyncio.from_url to hand out a mock client."""
    with patch.object(
        redis_backend_module.redis, "from_url", return_value=make_redis_client()
    ) as from_url:
        yield from_url


@pytest.fixture
def redis_client(redis_from_url):
    """The mock Redis client handed out by the patched from_url."""
    return redis_from_url.return_value


@pytest.fixture
def make_client():
    """Factory for additional mock Redis clients."""
    return make_redis_client
