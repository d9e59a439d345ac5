"""
Cache Module

Two-tier caching (local in-memory + Redis) with composed keys.
"""

from .bounded_store import BoundedRedisStore
from .keys import KeyComposer, LogicalKeys
from .local_store import LocalStore
from .memory_probe import PsutilMemoryProbe, StaticMemoryProbe
from .multilevel import MultilevelCache
from .remote_store import RedisStore
from .ttl import TTL, ResolvedTTL, TieredTTL, TTLSpec, TTLValue, resolve_ttl, to_milliseconds

__all__ = [
    "BoundedRedisStore",
    "KeyComposer",
    "LogicalKeys",
    "LocalStore",
    "MultilevelCache",
    "PsutilMemoryProbe",
    "RedisStore",
    "ResolvedTTL",
    "StaticMemoryProbe",
    "TTL",
    "TTLSpec",
    "TTLValue",
    "TieredTTL",
    "resolve_ttl",
    "to_milliseconds",
]
