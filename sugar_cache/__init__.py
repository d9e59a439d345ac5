"""
sugar-cache

Two-tier (in-process + Redis) caching client with composite keys, cluster
hash tags, per-tier TTLs, width-bounded LRU eviction and memoization
decorators.

Usage:
    from sugar_cache import SugarCache, TTLValue, TimeUnit

    cache = SugarCache(redis_client, {"namespace": "users", "keys": ["userId"]})
"""

from sugar_cache.application import CacheOptions, CachedFunction, InMemoryCacheOptions, SugarCache
from sugar_cache.core.config.constants import EvictionScheme, TimeUnit
from sugar_cache.core.exceptions import (
    ArgumentMismatchError,
    CacheConnectionError,
    CacheError,
    CacheSerializationError,
    CacheTransportError,
    ConfigurationError,
    InvalidTTLError,
    SugarCacheError,
)
from sugar_cache.core.logging import setup_logging
from sugar_cache.infrastructure.cache.ttl import TieredTTL, TTLValue
from sugar_cache.infrastructure.redis import ConnectionManager, close_redis, init_redis

__version__ = "1.0.0"

__all__ = [
    "SugarCache",
    "CacheOptions",
    "InMemoryCacheOptions",
    "CachedFunction",
    "TTLValue",
    "TieredTTL",
    "TimeUnit",
    "EvictionScheme",
    "SugarCacheError",
    "ConfigurationError",
    "InvalidTTLError",
    "CacheError",
    "CacheConnectionError",
    "CacheTransportError",
    "CacheSerializationError",
    "ArgumentMismatchError",
    "setup_logging",
    "ConnectionManager",
    "init_redis",
    "close_redis",
]
