"""Tests for the permission cache."""

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from productboard_mcp.permissions.cache import CachedPermissions, PermissionCache, credential_key
from productboard_mcp.permissions.permissions import AccessLevel, PermissionModel


@pytest.fixture
def read_model() -> PermissionModel:
    """Create a read-only PermissionModel."""
    return PermissionModel(
        access_level=AccessLevel.READ, can_write=False, can_delete=False, is_admin=False
    )


class TestCredentialKey:
    """Tests for credential_key."""

    def test_key_does_not_contain_token(self):
        """Test the raw token is not used as the key."""
        key = credential_key("secret-token")
        assert "secret-token" not in key
        assert len(key) == 64

    def test_key_is_stable(self):
        """Test the same token always maps to the same key."""
        assert credential_key("a") == credential_key("a")
        assert credential_key("a") != credential_key("b")


class TestCachedPermissions:
    """Tests for CachedPermissions expiry."""

    def test_not_expired(self, read_model):
        """Test an entry in the future is live."""
        entry = CachedPermissions(read_model, datetime.now(UTC) + timedelta(minutes=5))
        assert entry.is_expired() is False
        assert entry.time_until_expiry() > timedelta(0)

    def test_expired(self, read_model):
        """Test an entry in the past is expired."""
        entry = CachedPermissions(read_model, datetime.now(UTC) - timedelta(seconds=1))
        assert entry.is_expired() is True


class TestPermissionCache:
    """Tests for PermissionCache."""

    def test_set_and_get(self, read_model):
        """Test storing and retrieving a model."""
        cache = PermissionCache(ttl_seconds=60)
        cache.set("token", read_model)

        assert cache.get("token") is read_model
        assert cache.get("other-token") is None
        assert len(cache) == 1

    def test_hit_logs_remaining_lifetime(self, read_model, caplog):
        """Test a cache hit reports how long the entry stays valid."""
        cache = PermissionCache(ttl_seconds=600)
        cache.set("token", read_model)

        with caplog.at_level(logging.DEBUG, logger="productboard_mcp.permissions.cache"):
            cache.get("token")

        assert "Using cached permissions (expires in 59" in caplog.text

    def test_expired_entry_is_dropped(self, read_model):
        """Test expired entries are treated as misses and removed."""
        cache = PermissionCache(ttl_seconds=60)
        cache.set("token", read_model)
        key = credential_key("token")
        cache._entries[key] = CachedPermissions(read_model, datetime.now(UTC) - timedelta(seconds=1))

        assert cache.get("token") is None
        assert len(cache) == 0

    def test_zero_ttl_disables_caching(self, read_model):
        """Test a TTL of zero never stores anything."""
        cache = PermissionCache(ttl_seconds=0)
        cache.set("token", read_model)

        assert cache.get("token") is None

    def test_invalidate_and_clear(self, read_model):
        """Test explicit removal."""
        cache = PermissionCache(ttl_seconds=60)
        cache.set("a", read_model)
        cache.set("b", read_model)

        assert cache.invalidate("a") is True
        assert cache.invalidate("a") is False
        assert cache.get("b") is read_model

        cache.clear()
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_get_or_discover_miss_then_hit(self, read_model):
        """Test discovery runs once and later lookups hit the cache."""
        cache = PermissionCache(ttl_seconds=60)
        discover = AsyncMock(return_value=read_model)

        first = await cache.get_or_discover("token", discover)
        second = await cache.get_or_discover("token", discover)

        assert first is read_model
        assert second is read_model
        discover.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_concurrent_misses_discover_once(self, read_model):
        """Test simultaneous lookups share a single discovery run."""
        cache = PermissionCache(ttl_seconds=60)
        calls = 0

        async def discover() -> PermissionModel:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.01)
            return read_model

        results = await asyncio.gather(*(cache.get_or_discover("token", discover) for _ in range(5)))

        assert calls == 1
        assert all(r is read_model for r in results)

    @pytest.mark.asyncio
    async def test_discovery_error_is_not_cached(self, read_model):
        """Test a failed discovery propagates and the next call retries."""
        cache = PermissionCache(ttl_seconds=60)
        discover = AsyncMock(side_effect=[RuntimeError("transport down"), read_model])

        with pytest.raises(RuntimeError):
            await cache.get_or_discover("token", discover)

        assert await cache.get_or_discover("token", discover) is read_model
