"""Process-wide cache container.

The container owns the single :class:`CacheService` (and therefore the single
Redis connection) for the lifetime of the process, together with the
accessors built on it. Tests create isolated containers with
``create_container()`` instead of touching the global one.

Usage:
    container = create_container()
    await container.initialize(settings)
    set_container(container)

    captions = get_container().captions

    # Graceful shutdown / test teardown
    await shutdown_container()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from memecache.core.config import Settings
from memecache.core.errors import ServiceNotInitializedError
from memecache.core.logging import get_logger
from memecache.services.cache import CacheConfig, CacheService, CaptionsCache, ImageUrlCache

logger = get_logger(__name__)


@dataclass
class CacheContainer:
    """Holds the cache facade and its accessors.

    Services are accessed through properties that raise
    ServiceNotInitializedError if accessed before initialization.
    """

    _cache: Optional[CacheService] = field(default=None, repr=False)
    _captions: Optional[CaptionsCache] = field(default=None, repr=False)
    _images: Optional[ImageUrlCache] = field(default=None, repr=False)
    _initialized: bool = field(default=False, repr=True)
    _settings: Optional[Settings] = field(default=None, repr=False)

    async def initialize(self, settings: Optional[Settings] = None) -> None:
        """Build the cache service and accessors.

        Redis is not contacted here; the first cache operation connects.
        """
        if self._initialized:
            logger.warning("Container already initialized, skipping")
            return

        settings = settings or Settings()
        self._settings = settings
        ttl_config = CacheConfig.from_settings(settings)

        if self._cache is None:
            self._cache = CacheService.from_settings(settings)
        self._captions = CaptionsCache(self._cache, ttl=ttl_config.captions_ttl)
        self._images = ImageUrlCache(self._cache, ttl=ttl_config.image_ttl)

        self._initialized = True
        logger.info("Cache container initialized", redis_configured=self._cache.redis_configured)

    async def shutdown(self) -> None:
        """Close the Redis connection. Idempotent."""
        if self._cache is not None:
            await self._cache.close()
        self._initialized = False
        logger.info("Cache container shut down")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            raise ServiceNotInitializedError("settings")
        return self._settings

    @property
    def cache(self) -> CacheService:
        """Get the cache facade."""
        if self._cache is None:
            raise ServiceNotInitializedError("cache")
        return self._cache

    @property
    def captions(self) -> CaptionsCache:
        if self._captions is None:
            raise ServiceNotInitializedError("captions")
        return self._captions

    @property
    def images(self) -> ImageUrlCache:
        if self._images is None:
            raise ServiceNotInitializedError("images")
        return self._images

    def set_cache(self, cache: CacheService) -> None:
        """Use a prebuilt cache service (for testing); call before initialize()."""
        self._cache = cache


# Module-level container instance
_container: Optional[CacheContainer] = None


def get_container() -> CacheContainer:
    """Get the global cache container.

    Raises:
        RuntimeError: If the container hasn't been created yet.
    """
    if _container is None:
        raise RuntimeError("Cache container not created. Call set_container() first.")
    return _container


def set_container(container: Optional[CacheContainer]) -> None:
    """Set (or clear, with None) the global cache container."""
    global _container
    _container = container


def create_container() -> CacheContainer:
    """Create a new, isolated container instance."""
    return CacheContainer()


async def shutdown_container() -> None:
    """Shut down and forget the global container. Safe when none exists."""
    global _container
    container, _container = _container, None
    if container is not None:
        await container.shutdown()
