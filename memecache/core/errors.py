"""Custom error types for the cache layer.

Backend faults (Redis down, timeouts, undecodable payloads) never leave the
cache facade; they are logged and converted into misses. Only errors that
signal a broken caller contract are raised to callers.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Categories of cache errors."""
    USAGE = "usage"
    SERIALIZATION = "serialization"
    BACKEND = "backend"
    LIFECYCLE = "lifecycle"


class CacheError(Exception):
    """Base exception for cache errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.BACKEND,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error": self.message,
            "category": self.category.value,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class CacheUsageError(CacheError):
    """The caller violated the cache contract."""

    def __init__(self, message: str, key: Optional[str] = None, **details: Any):
        if key is not None:
            details["key"] = key
        super().__init__(message, category=ErrorCategory.USAGE, details=details)


class CacheSerializationError(CacheUsageError):
    """A value handed to ``set`` cannot be encoded as JSON."""

    def __init__(self, message: str, key: Optional[str] = None, value_type: Optional[str] = None):
        details = {}
        if value_type:
            details["value_type"] = value_type
        super().__init__(message, key=key, **details)
        self.category = ErrorCategory.SERIALIZATION


class InvalidTTLError(CacheUsageError):
    """A TTL that is not a positive number of seconds."""

    def __init__(self, ttl: Any, key: Optional[str] = None):
        super().__init__(f"TTL must be a positive number of seconds, got {ttl!r}", key=key, ttl=repr(ttl))
        self.ttl = ttl


class BackendUnavailableError(CacheError):
    """Raised inside the Redis adapter when no usable connection exists.

    Never propagates past the adapter.
    """

    def __init__(self, message: str = "Redis backend unavailable", operation: Optional[str] = None):
        details = {}
        if operation:
            details["operation"] = operation
        super().__init__(message, category=ErrorCategory.BACKEND, details=details)


class ServiceNotInitializedError(CacheError):
    """Raised when accessing a container service before initialization."""

    def __init__(self, service_name: str):
        super().__init__(
            f"Service '{service_name}' has not been initialized. "
            f"Call container.initialize() first.",
            category=ErrorCategory.LIFECYCLE,
            details={"service": service_name},
        )
        self.service_name = service_name
