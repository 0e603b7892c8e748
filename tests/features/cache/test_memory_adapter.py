"""Tests for the in-process cache adapter."""

import time

import pytest

from logistics_rbac.features.cache import MemoryAdapter


class TestMemoryAdapter:

    @pytest.mark.asyncio
    async def test_set_and_get(self, memory_cache):
        await memory_cache.set("perm:alice:shipments:read", "true", ttl=300)
        assert await memory_cache.get("perm:alice:shipments:read") == "true"
        assert await memory_cache.get("perm:alice:shipments:delete") is None

    @pytest.mark.asyncio
    async def test_expired_entry_is_a_miss(self, memory_cache):
        await memory_cache.set("k", "v", ttl=300)
        memory_cache._store["k"].expires_at = time.monotonic() - 1

        assert await memory_cache.get("k") is None
        assert "k" not in memory_cache._store

    @pytest.mark.asyncio
    async def test_no_ttl_never_expires(self, memory_cache):
        await memory_cache.set("k", "v")
        assert memory_cache._store["k"].expires_at is None
        assert not memory_cache._store["k"].is_expired

    @pytest.mark.asyncio
    async def test_lru_eviction(self):
        cache = MemoryAdapter(max_size=2)
        await cache.set("a", "1")
        await cache.set("b", "2")
        await cache.get("a")
        await cache.set("c", "3")

        assert await cache.get("a") == "1"
        assert await cache.get("b") is None
        assert await cache.get("c") == "3"

    @pytest.mark.asyncio
    async def test_delete(self, memory_cache):
        await memory_cache.set("k", "v")
        assert await memory_cache.delete("k") is True
        assert await memory_cache.delete("k") is False

    @pytest.mark.asyncio
    async def test_delete_prefix_only_touches_prefix(self, memory_cache):
        await memory_cache.set("perm:alice:shipments:read", "true")
        await memory_cache.set("perm:alice:reports:generate", "false")
        await memory_cache.set("perm:alice2:shipments:read", "true")
        await memory_cache.set("perm:bob:shipments:read", "true")

        assert await memory_cache.delete_prefix("perm:alice:") == 2
        assert sorted(await memory_cache.keys()) == [
            "perm:alice2:shipments:read",
            "perm:bob:shipments:read",
        ]

    @pytest.mark.asyncio
    async def test_keys_pattern_skips_expired(self, memory_cache):
        await memory_cache.set("perm:alice:a:b", "true", ttl=300)
        await memory_cache.set("perm:bob:a:b", "true", ttl=300)
        await memory_cache.set("other", "x")
        memory_cache._store["perm:bob:a:b"].expires_at = time.monotonic() - 1

        assert await memory_cache.keys("perm:*") == ["perm:alice:a:b"]

    @pytest.mark.asyncio
    async def test_clear(self, memory_cache):
        await memory_cache.set("k", "v")
        await memory_cache.clear()
        assert await memory_cache.keys() == []

    @pytest.mark.asyncio
    async def test_connect_and_disconnect(self, memory_cache):
        await memory_cache.connect()
        assert memory_cache._cleanup_task is not None
        await memory_cache.set("k", "v")
        assert await memory_cache.health_check() is True

        await memory_cache.disconnect()
        assert memory_cache._cleanup_task is None
        assert await memory_cache.get("k") is None
