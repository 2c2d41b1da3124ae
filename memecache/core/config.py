"""Configuration settings for the meme cache."""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Redis Configuration (unset means local-only caching)
    redis_url: Optional[str] = None
    redis_connect_timeout: float = 2.0  # Seconds to establish a connection
    redis_socket_timeout: float = 2.0  # Seconds per command round-trip
    redis_reconnect_interval: float = 5.0  # Seconds before retrying a failed connection

    # Local Store Configuration
    local_cache_max_entries: int = 1000

    # TTL policy (seconds)
    cache_default_ttl: int = 300  # 5 minutes
    cache_captions_ttl: int = 300  # 5 minutes for generated captions
    cache_image_ttl: int = 86400  # 24 hours for rendered image URLs

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("redis_url", mode="before")
    @classmethod
    def _blank_url_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value.strip() if isinstance(value, str) else value

    @field_validator(
        "local_cache_max_entries",
        "cache_default_ttl",
        "cache_captions_ttl",
        "cache_image_ttl",
        "redis_connect_timeout",
        "redis_socket_timeout",
        "redis_reconnect_interval",
    )
    @classmethod
    def _must_be_positive(cls, value, info):
        if value <= 0:
            raise ValueError(f"{info.field_name} must be greater than 0, got {value}")
        return value

    @property
    def redis_configured(self) -> bool:
        """Whether a distributed store endpoint was provided."""
        return self.redis_url is not None


settings = Settings()


def reload_settings() -> Settings:
    """Re-read settings from the environment and replace the module instance."""
    global settings
    settings = Settings()
    return settings
