"""
Multilevel Cache

Composes the local and remote tiers.

Read path:
    local hit  -> return (trusted without remote confirmation)
    local miss -> remote -> return (no local warming)

Write path:
    remote (awaited) -> local, each with its own TTL

Delete path:
    remote -> local. Between the two steps a concurrent reader can still be
    served the local value; the window is bounded by one remote round trip
    and is not otherwise guarded.

The two tiers are never updated transactionally with respect to each other.
"""

from typing import Any

from sugar_cache.core.config.constants import CacheTier
from sugar_cache.core.interfaces import CacheStore
from sugar_cache.core.observability import CacheObserver
from sugar_cache.infrastructure.cache.ttl import ResolvedTTL


class MultilevelCache:
    """
    Local tier in front of the remote tier.

    Keys passed in are already composed; values are plain Python objects.
    """

    def __init__(self, remote: CacheStore, local: CacheStore, observer: CacheObserver):
        self.remote = remote
        self.local = local
        self._observer = observer

    async def get(self, key: str) -> Any | None:
        value = await self.local.get(key)
        if value is not None:
            self._observer.record_read(key, CacheTier.MEMORY)
            return value

        value = await self.remote.get(key)
        self._observer.record_read(key, CacheTier.REDIS if value is not None else None)
        return value

    async def set(self, key: str, value: Any, ttl: ResolvedTTL) -> None:
        await self.remote.set(key, value, ttl.redis_ms)
        await self.local.set(key, value, ttl.memory_ms)

    async def delete(self, key: str) -> None:
        # a reader in this process can still hit the local copy until the remote delete returns
        await self.remote.delete(key)
        await self.local.delete(key)

    async def clear(self) -> None:
        await self.remote.clear()
        await self.local.clear()

    async def mget(self, keys: list[str]) -> list[Any | None]:
        """
        Batched read.

        Local hits are answered in place; the misses go to the remote tier
        in a single batch and are written back into their request positions.
        """
        results = await self.local.batch_get(keys)

        missing = [i for i, value in enumerate(results) if value is None]
        for i, value in enumerate(results):
            if value is not None:
                self._observer.record_read(keys[i], CacheTier.MEMORY)

        if missing:
            fetched = await self.remote.batch_get([keys[i] for i in missing])
            for i, value in zip(missing, fetched):
                results[i] = value
                self._observer.record_read(keys[i], CacheTier.REDIS if value is not None else None)

        return results

    async def mset(self, keys: list[str], values: list[Any], ttl: ResolvedTTL) -> None:
        await self.remote.batch_set(keys, values, ttl.redis_ms)
        await self.local.batch_set(keys, values, ttl.memory_ms)

    async def mdel(self, keys: list[str]) -> None:
        await self.remote.batch_delete(keys)
        await self.local.batch_delete(keys)
