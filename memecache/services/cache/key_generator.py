"""Cache key generation for the meme cache.

Keys are human-readable so that semantically identical requests collide on
purpose: text fragments are lowercased, trimmed and have whitespace runs
collapsed into a single underscore before being joined.

Key format: cache:{namespace}:{fragment}[:{fragment}...]

Examples:
    cache:captions:funny_cats:123456
    cache:image:181913649:top_text:
"""

import re
from typing import Optional

KEY_PREFIX = "cache"

_WHITESPACE_RUN = re.compile(r"\s+")


def normalize_key(raw: str) -> str:
    """Normalize a raw string into a canonical key fragment.

    Lowercases, trims and collapses whitespace runs into ``_``. Everything
    else (punctuation, symbols) is left untouched.
    """
    return _WHITESPACE_RUN.sub("_", raw.lower().strip())


class CacheKeyGenerator:
    """Cache key construction for every namespace."""

    CAPTIONS = "captions"
    IMAGE = "image"

    @classmethod
    def build(cls, namespace: str, *parts: str) -> str:
        """Compose a namespaced key.

        Args:
            namespace: Fixed literal chosen by the caller; not normalized.
            *parts: Text fragments, each normalized independently.

        Returns:
            Cache key string.
        """
        fragments = [normalize_key(part) for part in parts]
        return ":".join([KEY_PREFIX, namespace, *fragments])

    @classmethod
    def captions(cls, topic: str, template_id: Optional[str] = None) -> str:
        """Generate cache key for generated captions.

        The template id is left out entirely when missing or empty.
        """
        if not template_id:
            return cls.build(cls.CAPTIONS, topic)
        return cls.build(cls.CAPTIONS, topic, template_id)

    @classmethod
    def image(cls, template_id: str, top_text: str, bottom_text: str) -> str:
        """Generate cache key for a rendered image URL.

        Empty overlay text is kept as its own (empty) fragment.
        """
        return cls.build(cls.IMAGE, template_id, top_text, bottom_text)

    @classmethod
    def pattern(cls, namespace: Optional[str] = None) -> str:
        """Key prefix matching every key, or every key of one namespace."""
        if namespace is None:
            return f"{KEY_PREFIX}:"
        return f"{KEY_PREFIX}:{namespace}:"
