"""
Redis Module

Connection lifecycle for the remote tier.
"""

from .connection import (
    ConnectionManager,
    RedisConnection,
    close_redis,
    get_connection_manager,
    init_redis,
    is_cluster,
    ping_latency,
)

__all__ = [
    "ConnectionManager",
    "RedisConnection",
    "close_redis",
    "get_connection_manager",
    "init_redis",
    "is_cluster",
    "ping_latency",
]
