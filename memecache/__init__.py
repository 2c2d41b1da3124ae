"""Two-tier caching layer for caption and meme image generation."""

__version__ = "1.0.0"
