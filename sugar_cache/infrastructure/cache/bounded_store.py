"""
Width-bounded Redis tier (legacy single-tier mode).

Caps the number of entries in a namespace with a recency-ordered sorted
set (the eviction index) instead of relying on TTL expiry alone.

Key layout:
    <namespace>:cache:<composed key>   value
    <namespace>:scoreSet               index, member = value key, score = -now_ms

Scoring:
    The newest write or read gets the lowest score, so ranking ascending
    puts the most-recently-used entries first. After each write
    ``ZRANGE index width -1`` returns exactly the entries past the width;
    those are removed from the index and the keyspace in one follow-up
    transaction.

Index Sweep:
    Values expire natively in Redis but their index members do not. When a
    TTL window is configured, a background task periodically runs
    ``ZREMRANGEBYSCORE index -(now - ttl) +inf`` to drop members whose last
    touch is older than the window. Sweep failures are logged and the task
    keeps running.
"""

import asyncio
import math
import time
from typing import Any

from redis.exceptions import RedisError

from sugar_cache.core.config.constants import (
    DEFAULT_INDEX_SWEEP_INTERVAL,
    EVICTION_INDEX_SEGMENT,
    KEY_SEPARATOR,
    EvictionScheme,
    RedisScoreBound,
    Stage,
)
from sugar_cache.core.exceptions import CacheError, ConfigurationError
from sugar_cache.core.logging.logger import log_stage
from sugar_cache.core.observability import CacheObserver
from sugar_cache.infrastructure.cache import serialization
from sugar_cache.infrastructure.cache.remote_store import RedisStore
from sugar_cache.infrastructure.redis.connection import RedisConnection


def _now_ms() -> float:
    return time.time_ns() / 1_000_000


class BoundedRedisStore(RedisStore):
    """
    Redis tier that keeps at most ``width`` entries per namespace.

    Usage:
        store = BoundedRedisStore(redis_client, "sugar-cache:users", observer, width=100)
        store.start()   # only needed when ttl_ms is set
        ...
        await store.stop()
    """

    def __init__(
        self,
        redis: RedisConnection,
        namespace: str,
        observer: CacheObserver,
        width: int,
        scheme: EvictionScheme | str = EvictionScheme.LRU,
        ttl_ms: int | None = None,
        sweep_interval: float = DEFAULT_INDEX_SWEEP_INTERVAL,
    ):
        """
        Args:
            redis: Connected ``Redis`` or ``RedisCluster`` client
            namespace: Effective namespace prefix
            observer: Metrics/logging sink
            width: Maximum number of entries kept
            scheme: Ranking scheme for the index (only LRU is supported)
            ttl_ms: Index window; enables the background sweep when set
            sweep_interval: Seconds between sweeps

        Raises:
            ConfigurationError: If width < 1 or the scheme is unsupported
        """
        if width < 1:
            raise ConfigurationError("Width must be a positive integer", details={"width": width})

        scheme = EvictionScheme(scheme)
        if scheme is not EvictionScheme.LRU:
            raise ConfigurationError(
                f"Eviction scheme {scheme.value} is not supported",
                details={"supported": [EvictionScheme.LRU.value]},
            )

        super().__init__(redis, namespace, observer)
        self._width = width
        self._scheme = scheme
        self._ttl_ms = ttl_ms
        self._sweep_interval = sweep_interval
        self._index_key = f"{namespace}{KEY_SEPARATOR}{EVICTION_INDEX_SEGMENT}"
        self._sweep_task: asyncio.Task | None = None
        self._last_score = math.inf

    @property
    def width(self) -> int:
        return self._width

    @property
    def index_key(self) -> str:
        return self._index_key

    def score(self) -> float:
        """
        Recency score for a touch happening now.

        Strictly lower than every score this store handed out before, so
        touches within the same clock tick still rank in call order.
        """
        if self._scheme is EvictionScheme.LRU:
            self._last_score = min(-_now_ms(), math.nextafter(self._last_score, -math.inf))
            return self._last_score
        raise ConfigurationError(f"Eviction scheme {self._scheme.value} is not supported")

    # -------------------------------------------------------------------------
    # Eviction
    # -------------------------------------------------------------------------

    async def _evict(self, overflow: list[str]) -> None:
        """Remove index members past the width together with their values."""
        if not overflow:
            return

        pipe = self._pipeline()
        pipe.zrem(self._index_key, *overflow)
        for key in overflow:
            pipe.delete(key)
        await self._execute(pipe, "evict")
        self._observer.record_evictions(overflow)

    # -------------------------------------------------------------------------
    # Point operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        entry_key = self.entry_key(key)

        pipe = self._pipeline()
        pipe.get(entry_key)
        pipe.zadd(self._index_key, {entry_key: self.score()})
        raw, _ = await self._execute(pipe, "get")

        if raw is None:
            # value expired natively; the touch above re-added a stale member
            with self._transport("get", key=entry_key):
                await self._redis.zrem(self._index_key, entry_key)
            return None
        return self._decode(entry_key, raw)

    async def set(self, key: str, value: Any, ttl_ms: int | None) -> None:
        entry_key = self.entry_key(key)
        payload = serialization.dumps(value)

        pipe = self._pipeline()
        pipe.set(entry_key, payload, px=ttl_ms)
        pipe.zadd(self._index_key, {entry_key: self.score()})
        pipe.zrange(self._index_key, self._width, -1)
        results = await self._execute(pipe, "set")

        self._observer.record_operation("set")
        await self._evict(list(results[-1]))

    async def delete(self, key: str) -> None:
        entry_key = self.entry_key(key)

        pipe = self._pipeline()
        pipe.delete(entry_key)
        pipe.zrem(self._index_key, entry_key)
        await self._execute(pipe, "delete")
        self._observer.record_operation("delete")

    # -------------------------------------------------------------------------
    # Batched operations
    # -------------------------------------------------------------------------

    async def batch_get(self, keys: list[str]) -> list[Any | None]:
        if not keys:
            return []

        entry_keys = [self.entry_key(k) for k in keys]

        pipe = self._pipeline()
        for entry_key in entry_keys:
            pipe.get(entry_key)
            pipe.zadd(self._index_key, {entry_key: self.score()})
        results = await self._execute(pipe, "batch_get")

        raws = results[::2]
        stale = [k for k, raw in zip(entry_keys, raws) if raw is None]
        if stale:
            with self._transport("batch_get", stale=len(stale)):
                await self._redis.zrem(self._index_key, *stale)

        return [self._decode(k, raw) for k, raw in zip(entry_keys, raws)]

    async def batch_set(self, keys: list[str], values: list[Any], ttl_ms: int | None) -> None:
        if not keys:
            return

        payloads = [serialization.dumps(v) for v in values]

        pipe = self._pipeline()
        for key, payload in zip(keys, payloads, strict=True):
            entry_key = self.entry_key(key)
            pipe.set(entry_key, payload, px=ttl_ms)
            # later keys in the batch count as more recent
            pipe.zadd(self._index_key, {entry_key: self.score()})
        pipe.zrange(self._index_key, self._width, -1)
        results = await self._execute(pipe, "batch_set")

        self._observer.record_operation("set", len(keys))
        await self._evict(list(results[-1]))

    async def batch_delete(self, keys: list[str]) -> None:
        if not keys:
            return

        entry_keys = [self.entry_key(k) for k in keys]
        pipe = self._pipeline()
        for entry_key in entry_keys:
            pipe.delete(entry_key)
        pipe.zrem(self._index_key, *entry_keys)
        await self._execute(pipe, "batch_delete")
        self._observer.record_operation("delete", len(keys))

    # -------------------------------------------------------------------------
    # Index sweep
    # -------------------------------------------------------------------------

    async def sweep(self) -> int:
        """
        Drop index members last touched before the TTL window.

        Returns:
            Number of members removed (0 when no TTL is configured)
        """
        if self._ttl_ms is None:
            return 0

        cutoff = -(_now_ms() - self._ttl_ms)
        with self._transport("sweep"):
            removed = await self._redis.zremrangebyscore(self._index_key, cutoff, RedisScoreBound.MAX.value)

        if removed:
            log_stage(self._observer.logger, Stage.REMOTE_SWEEP, "Stale index members removed", removed=removed)
        return removed

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                await self.sweep()
            except (CacheError, RedisError) as e:
                self._observer.logger.error(
                    "Index sweep failed", stage=Stage.REMOTE_SWEEP.value, error=str(e)
                )

    def start(self) -> None:
        """Launch the background sweep if a TTL window is configured."""
        if self._ttl_ms is None or self._sweep_task is not None:
            return
        self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_loop())
        log_stage(
            self._observer.logger,
            Stage.REMOTE_SWEEP,
            "Index sweep started",
            interval_seconds=self._sweep_interval,
            ttl_ms=self._ttl_ms,
        )

    async def stop(self) -> None:
        """Cancel the background sweep and wait for it to finish."""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    @property
    def sweeping(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()
