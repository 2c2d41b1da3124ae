"""Tests for the process-wide cache container."""

import pytest

from memecache.core.config import Settings
from memecache.core.container import (
    CacheContainer,
    ServiceNotInitializedError,
    create_container,
    get_container,
    set_container,
    shutdown_container,
)
from memecache.services.cache import CacheService, CaptionsCache, ImageUrlCache


@pytest.fixture(autouse=True)
def reset_global_container():
    """Ensure each test starts and ends without a global container."""
    set_container(None)
    yield
    set_container(None)


@pytest.fixture
def local_settings():
    return Settings(redis_url=None, cache_captions_ttl=120, cache_image_ttl=3600)


class TestCacheContainerLifecycle:
    """Tests for initialization and shutdown."""

    def test_create_container(self):
        """Test container creation starts uninitialized."""
        container = create_container()

        assert isinstance(container, CacheContainer)
        assert container.is_initialized is False

    @pytest.mark.asyncio
    async def test_initialize_builds_services(self, local_settings):
        """Test initialize wires the facade and both accessors."""
        container = create_container()
        await container.initialize(local_settings)

        assert container.is_initialized is True
        assert isinstance(container.cache, CacheService)
        assert isinstance(container.captions, CaptionsCache)
        assert isinstance(container.images, ImageUrlCache)
        assert container.settings is local_settings

    @pytest.mark.asyncio
    async def test_accessors_share_one_cache(self, local_settings):
        """Test both accessors use the single cache facade."""
        container = create_container()
        await container.initialize(local_settings)

        assert container.captions.cache is container.cache
        assert container.images.cache is container.cache

    @pytest.mark.asyncio
    async def test_accessor_ttls_from_settings(self, local_settings):
        """Test accessor TTLs follow the configured policy."""
        container = create_container()
        await container.initialize(local_settings)

        assert container.captions.ttl == 120
        assert container.images.ttl == 3600

    @pytest.mark.asyncio
    async def test_initialize_twice_keeps_services(self, local_settings):
        """Test a second initialize is a no-op."""
        container = create_container()
        await container.initialize(local_settings)
        cache = container.cache

        await container.initialize(Settings(redis_url=None))

        assert container.cache is cache
        assert container.settings is local_settings

    @pytest.mark.asyncio
    async def test_set_cache_before_initialize(self, local_settings, layered_cache):
        """Test a prebuilt cache service is used instead of building one."""
        container = create_container()
        container.set_cache(layered_cache)
        await container.initialize(local_settings)

        assert container.cache is layered_cache
        assert container.captions.cache is layered_cache

    @pytest.mark.asyncio
    async def test_shutdown_closes_cache(self, local_settings, layered_cache, fake_remote):
        """Test shutdown closes the remote connection and is repeatable."""
        container = create_container()
        container.set_cache(layered_cache)
        await container.initialize(local_settings)

        await container.shutdown()
        await container.shutdown()

        assert container.is_initialized is False
        assert fake_remote.closed == 2


class TestServiceAccess:
    """Tests for access before initialization."""

    @pytest.mark.parametrize("name", ["cache", "captions", "images", "settings"])
    def test_uninitialized_access_raises(self, name):
        """Test every service property raises before initialize."""
        container = create_container()

        with pytest.raises(ServiceNotInitializedError) as exc_info:
            getattr(container, name)

        assert exc_info.value.service_name == name
        assert "has not been initialized" in str(exc_info.value)


class TestGlobalContainer:
    """Tests for the module-level container."""

    def test_get_container_without_set_raises(self):
        """Test getting the container before it is set raises."""
        with pytest.raises(RuntimeError):
            get_container()

    def test_set_and_get_container(self):
        """Test the set container is returned."""
        container = create_container()
        set_container(container)

        assert get_container() is container

    @pytest.mark.asyncio
    async def test_shutdown_container(self, local_settings):
        """Test shutdown clears the global container."""
        container = create_container()
        await container.initialize(local_settings)
        set_container(container)

        await shutdown_container()

        assert container.is_initialized is False
        with pytest.raises(RuntimeError):
            get_container()

    @pytest.mark.asyncio
    async def test_shutdown_container_without_container(self):
        """Test shutdown is safe when nothing was set."""
        await shutdown_container()
