"""
Cache-Related Exceptions

All exceptions raised by cache operations at runtime (Redis, local tier,
memoization).
"""

from sugar_cache.core.exceptions.base import SugarCacheError


class CacheError(SugarCacheError):
    """Base exception for cache runtime errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to Redis.

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Incorrect host/port configuration
    - Authentication failure
    """
    pass


class CacheTransportError(CacheError):
    """
    Raised when a Redis command, pipeline or transaction fails.

    Also raised when a transaction completes but one of its replies is an
    error element. Never retried internally.
    """
    pass


class CacheSerializationError(CacheError):
    """
    Raised when a value cannot be serialized for the remote tier.

    Parse failures on read are treated as misses and never raise.
    """
    pass


class ArgumentMismatchError(CacheError):
    """
    Raised when call arguments do not line up with the cache's key set.

    Common causes:
    - ``mset`` called with different numbers of keys and values
    - A logical key mapping missing a declared name, or carrying extra ones
    - A memoized function called without an argument its cache key needs
    """
    pass
