"""JSON boundary shared by both cache stores."""

import json
from typing import Any, Optional

from memecache.core.errors import CacheSerializationError


def encode(value: Any, key: Optional[str] = None) -> str:
    """Serialize a value to JSON text.

    Raises:
        CacheSerializationError: If the value is not JSON-serializable.
    """
    try:
        return json.dumps(value, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise CacheSerializationError(
            f"Value of type {type(value).__name__} is not JSON-serializable: {e}",
            key=key,
            value_type=type(value).__name__,
        ) from e


def decode(payload: str) -> Any:
    """Deserialize JSON text produced by :func:`encode`.

    Raises:
        json.JSONDecodeError, TypeError: On malformed payloads.
    """
    return json.loads(payload)
