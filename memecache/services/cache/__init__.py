"""Two-tier cache for caption and image generation results.

Components:
- Key normalization and construction (key_generator)
- Local LRU store and optional Redis store (backends)
- CacheService: facade with Redis-first reads and local fallback
- CaptionsCache / ImageUrlCache: fixed-policy accessors

Usage:
    from memecache.services.cache import CacheService, CaptionsCache

    cache = CacheService.from_settings()
    captions = CaptionsCache(cache)

    cached = await captions.get_captions("funny cats", "181913649")
    if cached is None:
        cached = await generate(...)
        await captions.set_captions("funny cats", "181913649", cached)
"""

from memecache.services.cache.accessors import (
    CAPTIONS_CACHE_TTL,
    IMAGE_CACHE_TTL,
    CacheAccessor,
    CacheConfig,
    CaptionsCache,
    ImageUrlCache,
)
from memecache.services.cache.cache_service import DEFAULT_TTL_SECONDS, MISSING, CacheService
from memecache.services.cache.key_generator import CacheKeyGenerator, normalize_key

__all__ = [
    "CAPTIONS_CACHE_TTL",
    "DEFAULT_TTL_SECONDS",
    "IMAGE_CACHE_TTL",
    "MISSING",
    "CacheAccessor",
    "CacheConfig",
    "CacheKeyGenerator",
    "CacheService",
    "CaptionsCache",
    "ImageUrlCache",
    "normalize_key",
]
