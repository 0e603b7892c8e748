"""Tests for the Redis adapter against a mocked redis.asyncio client."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from logistics_rbac.core.exceptions import CacheConnectionError, CacheError
from logistics_rbac.features.cache import RedisAdapter
from logistics_rbac.features.cache.adapters.redis_adapter import escape_glob


def _scan(keys):
    async def scan_iter(match=None, count=None):
        for key in keys:
            yield key
    return scan_iter


@pytest.fixture
def client():
    mock = MagicMock()
    mock.ping = AsyncMock(return_value=True)
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock()
    mock.delete = AsyncMock(side_effect=lambda *keys: len(keys))
    mock.flushdb = AsyncMock()
    mock.aclose = AsyncMock()
    return mock


@pytest.fixture
def adapter(client):
    return RedisAdapter("redis://localhost:6379/0", client=client)


def test_escape_glob():
    assert escape_glob("perm:a*b?[c]:") == r"perm:a\*b\?\[c\]:"


class TestRedisAdapter:

    @pytest.mark.asyncio
    async def test_requires_connection(self):
        adapter = RedisAdapter("redis://localhost:6379/0")
        with pytest.raises(CacheConnectionError):
            await adapter.get("k")
        assert await adapter.health_check() is False

    @pytest.mark.asyncio
    async def test_connect_pings(self, adapter, client):
        await adapter.connect()
        client.ping.assert_awaited_once()
        assert await adapter.health_check() is True

    @pytest.mark.asyncio
    async def test_connect_failure(self, adapter, client):
        client.ping.side_effect = RedisConnectionError("refused")
        with pytest.raises(CacheConnectionError):
            await adapter.connect()

    @pytest.mark.asyncio
    async def test_set_uses_ttl(self, adapter, client):
        await adapter.set("perm:alice:shipments:read", "true", ttl=300)
        client.set.assert_awaited_once_with("perm:alice:shipments:read", "true", ex=300)

    @pytest.mark.asyncio
    async def test_get_decodes_bytes(self, adapter, client):
        client.get.return_value = b"false"
        assert await adapter.get("k") == "false"

    @pytest.mark.asyncio
    async def test_errors_wrapped(self, adapter, client):
        client.get.side_effect = RedisConnectionError("gone")
        with pytest.raises(CacheError):
            await adapter.get("k")

    @pytest.mark.asyncio
    async def test_delete_prefix_scans_escaped_pattern(self, adapter, client):
        client.scan_iter = MagicMock(side_effect=_scan(["perm:alice:a:b", "perm:alice:c:d"]))

        assert await adapter.delete_prefix("perm:alice:") == 2
        client.scan_iter.assert_called_once_with(match="perm:alice:*", count=500)
        client.delete.assert_awaited_once_with("perm:alice:a:b", "perm:alice:c:d")

    @pytest.mark.asyncio
    async def test_delete_prefix_nothing_to_delete(self, adapter, client):
        client.scan_iter = MagicMock(side_effect=_scan([]))
        assert await adapter.delete_prefix("perm:ghost:") == 0
        client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_keys(self, adapter, client):
        client.scan_iter = MagicMock(side_effect=_scan([b"perm:a:b:c", "perm:d:e:f"]))
        assert await adapter.keys("perm:*") == ["perm:a:b:c", "perm:d:e:f"]

    @pytest.mark.asyncio
    async def test_disconnect_closes_client(self, adapter, client):
        await adapter.connect()
        await adapter.disconnect()
        client.aclose.assert_awaited_once()
        assert adapter.redis_client is None


@pytest.mark.asyncio
async def test_connect_sets_socket_timeouts(monkeypatch, client):
    calls = {}

    def fake_from_url(url, **kwargs):
        calls.update(kwargs, url=url)
        return client

    monkeypatch.setattr(
        "logistics_rbac.features.cache.adapters.redis_adapter.redis.from_url", fake_from_url
    )
    adapter = RedisAdapter("redis://cache:6379/0", max_connections=5, socket_timeout=0.5)
    await adapter.connect()

    assert calls["url"] == "redis://cache:6379/0"
    assert calls["socket_timeout"] == 0.5
    assert calls["socket_connect_timeout"] == 0.5
    assert calls["max_connections"] == 5
