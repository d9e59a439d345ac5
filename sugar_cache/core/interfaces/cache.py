"""
Cache Tier Protocols

Abstract protocols for the seams between the multilevel cache and its tiers,
enabling dependency injection and testability.

Architectural Decision: Protocol-based abstraction
- The multilevel cache only depends on ``CacheStore``; the remote tier can be
  the plain Redis store or the width-bounded one
- The local tier depends on a ``MemoryProbe`` capability instead of reading
  process statistics directly, so tests can inject a fake probe
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """
    Protocol implemented by both cache tiers.

    Keys are composed keys (see ``KeyComposer``); each tier adds its own
    namespace prefix. TTLs are whole milliseconds.

    Implementations:
    - LocalStore: process-local mapping with per-entry expiry timers
    - RedisStore: shared Redis tier
    - BoundedRedisStore: width-bounded Redis tier with an LRU index
    """

    async def get(self, key: str) -> Any | None:
        """
        Get value from the tier.

        Returns:
            Stored value or None on miss

        Raises:
            CacheTransportError: If the remote operation fails
        """
        ...

    async def set(self, key: str, value: Any, ttl_ms: int | None) -> None:
        """Store a value with a time-to-live in milliseconds."""
        ...

    async def delete(self, key: str) -> None:
        """Remove a value; missing keys are not an error."""
        ...

    async def clear(self) -> None:
        """Remove every entry under this tier's namespace."""
        ...

    async def batch_get(self, keys: list[str]) -> list[Any | None]:
        """Get many values; results keep the order of ``keys``."""
        ...

    async def batch_set(self, keys: list[str], values: list[Any], ttl_ms: int | None) -> None:
        """Store many values with one TTL."""
        ...

    async def batch_delete(self, keys: list[str]) -> None:
        """Remove many values."""
        ...


@runtime_checkable
class MemoryProbe(Protocol):
    """
    Memory-pressure capability consumed by the local tier.

    ``usage_ratio`` returns a value in [0, 1]; the local tier drops writes
    once it reaches the configured threshold.
    """

    def usage_ratio(self) -> float:
        ...
