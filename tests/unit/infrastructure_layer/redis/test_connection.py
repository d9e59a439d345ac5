"""
Unit Tests for Redis Connection Management

Tests connection lifecycle with the redis client classes patched out.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError

from sugar_cache.core.config.settings import RedisSettings
from sugar_cache.core.exceptions import CacheConnectionError
from sugar_cache.infrastructure.redis import connection
from sugar_cache.infrastructure.redis.connection import ConnectionManager, is_cluster
from tests.test_fixtures import FakeRedis, FakeRedisCluster

MODULE = "sugar_cache.infrastructure.redis.connection"


@pytest.mark.unit
class TestIsCluster:
    def test_single_node(self):
        assert is_cluster(FakeRedis()) is False

    def test_cluster_double(self):
        assert is_cluster(FakeRedisCluster()) is True


@pytest.mark.unit
class TestConnectionManager:
    async def test_connect_single_node(self):
        client = MagicMock()
        client.ping = AsyncMock(return_value=True)
        client.aclose = AsyncMock()

        with (
            patch(f"{MODULE}.ConnectionPool") as pool_class,
            patch(f"{MODULE}.redis.Redis", return_value=client) as redis_class,
        ):
            pool_class.return_value.disconnect = AsyncMock()
            manager = ConnectionManager(RedisSettings(REDIS_HOST="cache.local"))

            assert await manager.connect() is client
            assert manager.is_connected()
            assert pool_class.call_args.kwargs["host"] == "cache.local"
            assert pool_class.call_args.kwargs["decode_responses"] is True
            redis_class.assert_called_once()

            await manager.disconnect()

        client.aclose.assert_awaited_once()
        assert not manager.is_connected()
        assert manager.get_client() is None

    async def test_connect_is_idempotent(self):
        client = MagicMock()
        client.ping = AsyncMock(return_value=True)

        with patch(f"{MODULE}.ConnectionPool"), patch(f"{MODULE}.redis.Redis", return_value=client) as redis_class:
            manager = ConnectionManager(RedisSettings())
            await manager.connect()
            await manager.connect()

        redis_class.assert_called_once()

    async def test_connect_cluster(self):
        client = MagicMock()
        client.initialize = AsyncMock()
        client.ping = AsyncMock(return_value=True)

        with patch(f"{MODULE}.RedisCluster", return_value=client) as cluster_class:
            manager = ConnectionManager(RedisSettings(REDIS_CLUSTER_MODE=True))
            assert await manager.connect() is client

        client.initialize.assert_awaited_once()
        assert "db" not in cluster_class.call_args.kwargs

    async def test_connect_failure_wrapped(self):
        client = MagicMock()
        client.ping = AsyncMock(side_effect=ConnectionError("refused"))

        with patch(f"{MODULE}.ConnectionPool"), patch(f"{MODULE}.redis.Redis", return_value=client):
            manager = ConnectionManager(RedisSettings(REDIS_PORT=6390))

            with pytest.raises(CacheConnectionError) as exc_info:
                await manager.connect()

        assert exc_info.value.details["port"] == 6390
        assert not manager.is_connected()


@pytest.mark.unit
class TestGlobalConnection:
    async def test_init_and_close(self):
        manager = MagicMock()
        manager.connect = AsyncMock(return_value="client")
        manager.disconnect = AsyncMock()

        with patch(f"{MODULE}.ConnectionManager", return_value=manager):
            connection._connection_manager = None
            assert await connection.init_redis() == "client"
            assert connection.get_connection_manager() is manager

            await connection.close_redis()

        manager.disconnect.assert_awaited_once()
        assert connection._connection_manager is None
