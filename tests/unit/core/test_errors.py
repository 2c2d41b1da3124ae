"""Tests for cache error types."""

from memecache.core.errors import (
    BackendUnavailableError,
    CacheError,
    CacheSerializationError,
    CacheUsageError,
    ErrorCategory,
    InvalidTTLError,
)


class TestErrorHierarchy:
    """Tests for categories and details."""

    def test_serialization_error_is_usage_error(self):
        error = CacheSerializationError("not JSON", key="k", value_type="set")

        assert isinstance(error, CacheUsageError)
        assert error.category is ErrorCategory.SERIALIZATION
        assert error.details == {"key": "k", "value_type": "set"}

    def test_invalid_ttl_error(self):
        """Test the offending TTL is kept on the error."""
        error = InvalidTTLError(-5, key="k")

        assert error.ttl == -5
        assert error.category is ErrorCategory.USAGE
        assert "-5" in error.message

    def test_backend_error_not_usage_error(self):
        error = BackendUnavailableError(operation="GET")

        assert isinstance(error, CacheError)
        assert not isinstance(error, CacheUsageError)
        assert error.details == {"operation": "GET"}

    def test_to_dict(self):
        """Test errors serialize for structured logs."""
        data = CacheUsageError("bad call", key="k").to_dict()

        assert data["error"] == "bad call"
        assert data["category"] == "usage"
        assert data["details"] == {"key": "k"}
        assert "timestamp" in data
