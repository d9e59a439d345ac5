"""
Redis Connection Management

Opens and closes the remote-store connection the cache runs on, for a single
node or a cluster. ``SugarCache`` accepts any already-connected
``redis.asyncio.Redis`` / ``RedisCluster``; this module is the convenience
path for applications that want the library to build one from settings.

Architecture:
    ConnectionManager
        ├── single node: ConnectionPool + redis.asyncio.Redis
        └── cluster:     redis.asyncio.RedisCluster (topology discovered on connect)

Why Connection Pooling?
- Reuse connections instead of creating new ones per operation
- Max connections: burst capacity without unbounded sockets
- Health checks: early failure detection
"""

import time
from typing import Any

import redis.asyncio as redis
from redis.asyncio.cluster import RedisCluster
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import ConnectionError, RedisError, TimeoutError

from sugar_cache.core.config.constants import Stage
from sugar_cache.core.config.settings import RedisSettings, get_settings
from sugar_cache.core.exceptions import CacheConnectionError
from sugar_cache.core.logging.logger import get_logger, log_stage

logger = get_logger(__name__)

RedisConnection = redis.Redis | RedisCluster


def is_cluster(client: Any) -> bool:
    """True when ``client`` talks to a Redis Cluster rather than a single node."""
    if isinstance(client, RedisCluster):
        return True
    # duck-typed cluster clients expose the primaries of the topology
    return callable(getattr(type(client), "get_primaries", None))


class ConnectionManager:
    """
    Manages Redis connection lifecycle and pooling.

    Responsibility: Connection establishment, pooling, and cleanup.

    Pool Configuration (from ``RedisSettings``):
    - Max connections: REDIS_MAX_CONNECTIONS
    - Socket timeouts: REDIS_SOCKET_TIMEOUT / REDIS_SOCKET_CONNECT_TIMEOUT
    - Health check interval: REDIS_HEALTH_CHECK_INTERVAL
    - decode_responses: True (values are text, serialized with orjson)
    """

    def __init__(self, settings: RedisSettings | None = None):
        self._settings = settings or get_settings().redis
        self._pool: ConnectionPool | None = None
        self._client: RedisConnection | None = None
        self._is_connected = False

    async def connect(self) -> RedisConnection:
        """
        Establish connection to Redis.

        Returns:
            Connected ``Redis`` or ``RedisCluster`` client

        Raises:
            CacheConnectionError: If connection fails
        """
        if self._is_connected and self._client:
            return self._client

        s = self._settings
        try:
            if s.REDIS_CLUSTER_MODE:
                self._client = RedisCluster(
                    host=s.REDIS_HOST,
                    port=s.REDIS_PORT,
                    password=s.REDIS_PASSWORD,
                    max_connections=s.REDIS_MAX_CONNECTIONS,
                    socket_connect_timeout=s.REDIS_SOCKET_CONNECT_TIMEOUT,
                    socket_timeout=s.REDIS_SOCKET_TIMEOUT,
                    decode_responses=True,
                )
                await self._client.initialize()
            else:
                self._pool = ConnectionPool(
                    host=s.REDIS_HOST,
                    port=s.REDIS_PORT,
                    db=s.REDIS_DB,
                    password=s.REDIS_PASSWORD,
                    max_connections=s.REDIS_MAX_CONNECTIONS,
                    socket_connect_timeout=s.REDIS_SOCKET_CONNECT_TIMEOUT,
                    socket_timeout=s.REDIS_SOCKET_TIMEOUT,
                    health_check_interval=s.REDIS_HEALTH_CHECK_INTERVAL,
                    decode_responses=True,
                )
                self._client = redis.Redis(connection_pool=self._pool)

            await self._client.ping()
            self._is_connected = True

            log_stage(
                logger,
                Stage.REDIS_CONNECT,
                "Redis connected successfully",
                host=s.REDIS_HOST,
                port=s.REDIS_PORT,
                cluster=s.REDIS_CLUSTER_MODE,
            )
            return self._client

        except (ConnectionError, TimeoutError) as e:
            logger.error("Failed to connect to Redis", stage=Stage.REDIS_CONNECT.value, error=str(e))
            raise CacheConnectionError(
                message=f"Failed to connect to Redis: {e}",
                details={"host": s.REDIS_HOST, "port": s.REDIS_PORT},
            ) from e

    async def disconnect(self) -> None:
        """Close the client and its pool."""
        if self._client:
            await self._client.aclose()

        if self._pool:
            await self._pool.disconnect()

        self._client = None
        self._pool = None
        self._is_connected = False

        log_stage(logger, Stage.REDIS_DISCONNECT, "Redis disconnected")

    def get_client(self) -> RedisConnection | None:
        return self._client

    def is_connected(self) -> bool:
        return self._is_connected


async def ping_latency(client: RedisConnection) -> dict[str, Any]:
    """
    Ping Redis and report latency.

    Returns:
        Dict with status and ping latency in milliseconds
    """
    health: dict[str, Any] = {
        "status": "healthy",
        "cluster": is_cluster(client),
        "ping_latency_ms": None,
    }
    try:
        start = time.perf_counter()
        await client.ping()
        health["ping_latency_ms"] = round((time.perf_counter() - start) * 1000, 2)
    except RedisError as e:
        health["status"] = "unhealthy"
        health["error"] = str(e)
    return health


# =============================================================================
# GLOBAL INSTANCE (SINGLETON PATTERN)
# =============================================================================

_connection_manager: ConnectionManager | None = None


def get_connection_manager() -> ConnectionManager:
    """Get the global connection manager (singleton)."""
    global _connection_manager

    if _connection_manager is None:
        _connection_manager = ConnectionManager()

    return _connection_manager


async def init_redis() -> RedisConnection:
    """
    Connect the global connection manager.

    Returns:
        Connected Redis client
    """
    return await get_connection_manager().connect()


async def close_redis() -> None:
    """Close the global Redis connection."""
    global _connection_manager

    if _connection_manager:
        await _connection_manager.disconnect()
        _connection_manager = None
