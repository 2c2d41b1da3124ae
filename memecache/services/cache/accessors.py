"""Fixed-policy cache accessors for captions and rendered image URLs.

Each accessor pins a namespace, a key layout and a TTL on top of the
generic :class:`CacheService`.

Usage:
    captions = CaptionsCache(cache)
    await captions.set_captions("Funny Cats", "181913649", ["a", "b", "c"])
    await captions.get_captions("funny   cats", "181913649")  # same key

    images = ImageUrlCache(cache)
    await images.set_image_url("181913649", "Top Text", "", url)
    await images.get_image_url("181913649", "top text", "")
"""

from dataclasses import dataclass
from typing import Generic, List, Optional, TypeVar

from memecache.core.config import Settings
from memecache.services.cache.cache_service import DEFAULT_TTL_SECONDS, CacheService
from memecache.services.cache.key_generator import CacheKeyGenerator

T = TypeVar("T")

CAPTIONS_CACHE_TTL = 60 * 5  # 5 minutes
IMAGE_CACHE_TTL = 60 * 60 * 24  # 24 hours


@dataclass
class CacheConfig:
    """TTL policy per use case, in seconds."""

    default_ttl: int = DEFAULT_TTL_SECONDS

    # Captions are regenerated often; keep them short-lived
    captions_ttl: int = CAPTIONS_CACHE_TTL

    # Rendered images are immutable for a given template and text
    image_ttl: int = IMAGE_CACHE_TTL

    @classmethod
    def from_settings(cls, settings: Settings) -> "CacheConfig":
        return cls(
            default_ttl=settings.cache_default_ttl,
            captions_ttl=settings.cache_captions_ttl,
            image_ttl=settings.cache_image_ttl,
        )


class CacheAccessor(Generic[T]):
    """Base class for typed accessors bound to one namespace and TTL."""

    namespace: str = ""

    def __init__(self, cache: CacheService, ttl: int):
        self.cache = cache
        self.ttl = ttl

    async def _get(self, key: str) -> Optional[T]:
        return await self.cache.get(key)

    async def _set(self, key: str, value: T) -> None:
        await self.cache.set(key, value, self.ttl)

    async def clear(self) -> int:
        """Drop every entry of this accessor's namespace."""
        return await self.cache.clear(self.namespace)


class CaptionsCache(CacheAccessor[List[str]]):
    """Cache for generated captions keyed by topic and optional template."""

    namespace = CacheKeyGenerator.CAPTIONS

    def __init__(self, cache: CacheService, ttl: int = CAPTIONS_CACHE_TTL):
        super().__init__(cache, ttl)

    async def get_captions(self, topic: str, template_id: Optional[str] = None) -> Optional[List[str]]:
        """Get cached captions, or None on a miss."""
        return await self._get(CacheKeyGenerator.captions(topic, template_id))

    async def set_captions(
        self,
        topic: str,
        template_id: Optional[str],
        captions: List[str],
    ) -> None:
        """Cache captions for a topic and template."""
        await self._set(CacheKeyGenerator.captions(topic, template_id), list(captions))

    async def delete_captions(self, topic: str, template_id: Optional[str] = None) -> bool:
        return await self.cache.delete(CacheKeyGenerator.captions(topic, template_id))


class ImageUrlCache(CacheAccessor[str]):
    """Cache for rendered image URLs keyed by template and overlay text."""

    namespace = CacheKeyGenerator.IMAGE

    def __init__(self, cache: CacheService, ttl: int = IMAGE_CACHE_TTL):
        super().__init__(cache, ttl)

    async def get_image_url(self, template_id: str, top_text: str, bottom_text: str) -> Optional[str]:
        """Get a cached image URL, or None on a miss."""
        return await self._get(CacheKeyGenerator.image(template_id, top_text, bottom_text))

    async def set_image_url(
        self,
        template_id: str,
        top_text: str,
        bottom_text: str,
        image_url: str,
    ) -> None:
        """Cache the rendered image URL for a template and its text."""
        await self._set(CacheKeyGenerator.image(template_id, top_text, bottom_text), image_url)

    async def delete_image_url(self, template_id: str, top_text: str, bottom_text: str) -> bool:
        return await self.cache.delete(CacheKeyGenerator.image(template_id, top_text, bottom_text))
