"""
SugarCache - Public Cache API

Architecture:
    SugarCache (this module)
        ├── KeyComposer (logical keys -> composed key)
        ├── MultilevelCache
        │   ├── LocalStore (in-memory, per-entry expiry)
        │   └── RedisStore | BoundedRedisStore (width-bounded mode)
        ├── CacheObserver (metrics & logging)
        └── memoize / invalidate_memoized / update_memoized

Modes:
    - Multilevel (default): local tier in front of Redis, TTL per tier
    - Width-bounded (``width`` set): Redis only, at most ``width`` entries,
      least-recently-used entries evicted first. The local tier is disabled
      so evictions are visible to readers.

Usage:
    cache = SugarCache(redis_client, {"namespace": "users", "keys": ["userId"]})
    await cache.set({"userId": "42"}, {"name": "a"}, 5_000)
    await cache.get({"userId": "42"})
"""

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from sugar_cache.application import memoization
from sugar_cache.core.config.constants import KEY_SEPARATOR, EvictionScheme, Stage
from sugar_cache.core.config.settings import get_settings
from sugar_cache.core.exceptions import ArgumentMismatchError, ConfigurationError
from sugar_cache.core.interfaces import MemoryProbe
from sugar_cache.core.logging.logger import get_logger, log_stage
from sugar_cache.core.observability import CacheObserver
from sugar_cache.infrastructure.cache.bounded_store import BoundedRedisStore
from sugar_cache.infrastructure.cache.keys import KeyComposer, LogicalKeys
from sugar_cache.infrastructure.cache.local_store import LocalStore
from sugar_cache.infrastructure.cache.memory_probe import PsutilMemoryProbe
from sugar_cache.infrastructure.cache.multilevel import MultilevelCache
from sugar_cache.infrastructure.cache.remote_store import RedisStore
from sugar_cache.infrastructure.cache.ttl import TTLSpec, resolve_ttl
from sugar_cache.infrastructure.redis.connection import RedisConnection

# =============================================================================
# OPTIONS
# =============================================================================


class InMemoryCacheOptions(BaseModel):
    """Local tier options; ``None`` falls back to ``CacheSettings``."""

    model_config = ConfigDict(extra="forbid")

    enable: bool | None = None
    memory_threshold: float | None = Field(default=None, ge=0.0, le=1.0)


class CacheOptions(BaseModel):
    """
    Per-instance cache options.

    Only ``keys`` is required. ``hashtags`` flags logical keys whose values
    are wrapped in ``{}`` so Redis Cluster hashes on them alone.
    """

    model_config = ConfigDict(extra="forbid")

    namespace: str | None = None
    keys: list[str] = Field(min_length=1)
    in_memory_cache: InMemoryCacheOptions = Field(default_factory=InMemoryCacheOptions)
    hashtags: dict[str, bool] = Field(default_factory=dict)
    width: int | None = Field(default=None, ge=1)
    scheme: EvictionScheme = EvictionScheme.LRU
    ttl: Any = None

    @field_validator("keys")
    @classmethod
    def validate_unique_keys(cls, v):
        if len(set(v)) != len(v):
            raise ValueError("keys must be unique")
        return v

    @model_validator(mode="after")
    def validate_hashtags(self):
        unknown = set(self.hashtags) - set(self.keys)
        if unknown:
            raise ValueError(f"hashtags reference undeclared keys: {sorted(unknown)}")
        return self


def parse_options(options: CacheOptions | Mapping[str, Any]) -> CacheOptions:
    """
    Validate user options.

    Raises:
        ConfigurationError: With the pydantic error list in ``details``
    """
    if isinstance(options, CacheOptions):
        return options
    try:
        return CacheOptions.model_validate(options)
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid cache options",
            details={"errors": e.errors(include_url=False, include_context=False)},
        ) from e


# =============================================================================
# FACADE
# =============================================================================


class SugarCache:
    """
    Two-tier cache addressed by logical key mappings.

    Every operation takes a mapping covering exactly the declared ``keys``;
    the composed key is derived from its values, sorted by key name.

    Errors:
        ConfigurationError: invalid options or TTL (construction / call time)
        ArgumentMismatchError: key mapping or mset lengths don't line up
        CacheTransportError: Redis failed; nothing is retried
    """

    def __init__(
        self,
        redis: RedisConnection,
        options: CacheOptions | Mapping[str, Any],
        logger=None,
        *,
        memory_probe: MemoryProbe | None = None,
    ):
        """
        Args:
            redis: Connected ``redis.asyncio.Redis`` or ``RedisCluster`` (decode_responses=True)
            options: ``CacheOptions`` or an equivalent dict
            logger: structlog-style logger (defaults to ``sugar_cache`` bound to the namespace)
            memory_probe: Memory-pressure provider for the local tier (defaults to psutil)
        """
        self._options = parse_options(options)
        settings = get_settings().cache

        namespace = self._options.namespace or settings.CACHE_DEFAULT_NAMESPACE
        self._namespace = f"{settings.CACHE_KEY_PREFIX}{KEY_SEPARATOR}{namespace}"
        self._logger = logger or get_logger("sugar_cache").bind(namespace=self._namespace)
        self._observer = CacheObserver(self._namespace, self._logger)

        hashtags = [name for name, flagged in self._options.hashtags.items() if flagged]
        self._composer = KeyComposer(self._options.keys, hashtags)

        width = self._options.width
        if width is not None:
            ttl_ms = resolve_ttl(self._options.ttl).redis_ms if self._options.ttl is not None else None
            remote = BoundedRedisStore(
                redis,
                self._namespace,
                self._observer,
                width=width,
                scheme=self._options.scheme,
                ttl_ms=ttl_ms,
                sweep_interval=settings.CACHE_INDEX_SWEEP_INTERVAL,
            )
            local_enabled = False
        else:
            remote = RedisStore(redis, self._namespace, self._observer)
            enable = self._options.in_memory_cache.enable
            local_enabled = settings.CACHE_IN_MEMORY_ENABLED if enable is None else enable

        threshold = self._options.in_memory_cache.memory_threshold
        self._local = LocalStore(
            self._namespace,
            memory_probe or PsutilMemoryProbe(),
            self._observer,
            enabled=local_enabled,
            memory_threshold=settings.CACHE_MEMORY_THRESHOLD if threshold is None else threshold,
        )
        self._remote = remote
        self._cache = MultilevelCache(remote, self._local, self._observer)

        log_stage(
            self._logger,
            Stage.CACHE_INIT,
            "Cache initialized",
            keys=list(self._composer.keys),
            hashtags=hashtags,
            width=width,
            local_enabled=local_enabled,
            cluster=remote.cluster,
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def namespace(self) -> str:
        """Effective namespace prefix (``<key prefix>:<namespace>``)."""
        return self._namespace

    @property
    def keys(self) -> tuple[str, ...]:
        """Declared logical key names."""
        return self._composer.keys

    @property
    def logger(self):
        return self._logger

    @property
    def width(self) -> int | None:
        return self._options.width

    # -------------------------------------------------------------------------
    # Core Cache Operations
    # -------------------------------------------------------------------------

    async def get(self, keys: LogicalKeys) -> Any | None:
        """
        Read a value: local tier first, then Redis.

        Returns:
            Stored value or None when neither tier holds a live one
        """
        return await self._cache.get(self._composer.compose(keys))

    async def set(self, keys: LogicalKeys, value: Any, ttl: TTLSpec) -> None:
        """
        Write a value to both tiers.

        Args:
            keys: Logical key mapping
            value: JSON-serializable value
            ttl: Milliseconds, timedelta, ``TTLValue`` or per-tier ``TieredTTL``

        Raises:
            InvalidTTLError: Before anything is written
        """
        resolved = resolve_ttl(ttl)
        await self._cache.set(self._composer.compose(keys), value, resolved)

    async def delete(self, keys: LogicalKeys) -> None:
        """Remove a value from Redis, then from the local tier."""
        await self._cache.delete(self._composer.compose(keys))

    del_ = delete

    async def clear(self) -> None:
        """
        Remove everything under this namespace from both tiers.

        Expensive: walks the Redis keyspace. Meant for tests and admin use.
        """
        await self._cache.clear()
        log_stage(self._logger, Stage.CACHE_CLEAR, "Namespace cleared")

    # -------------------------------------------------------------------------
    # Batch Operations
    # -------------------------------------------------------------------------

    async def mget(self, keys_list: Sequence[LogicalKeys]) -> list[Any | None]:
        """Read many values; results follow the order of ``keys_list``."""
        return await self._cache.mget(self._composer.compose_many(keys_list))

    async def mset(self, keys_list: Sequence[LogicalKeys], values: Sequence[Any], ttl: TTLSpec) -> None:
        """
        Write many values with one TTL.

        Raises:
            ArgumentMismatchError: If the lengths differ (nothing is written)
        """
        if len(keys_list) != len(values):
            raise ArgumentMismatchError(
                "mset needs one value per key mapping",
                details={"keys": len(keys_list), "values": len(values)},
            )
        resolved = resolve_ttl(ttl)
        composed = self._composer.compose_many(keys_list)
        await self._cache.mset(composed, list(values), resolved)
        log_stage(self._logger, Stage.CACHE_BATCH, "Batch write", level="debug", count=len(composed))

    async def mdel(self, keys_list: Sequence[LogicalKeys]) -> None:
        await self._cache.mdel(self._composer.compose_many(keys_list))

    # -------------------------------------------------------------------------
    # Memoization
    # -------------------------------------------------------------------------

    def memoize(self, ttl: TTLSpec, args_by_key: memoization.ArgsByKey | None = None) -> Callable:
        """
        Decorator caching a function's result in this cache.

        Example:
            @cache.memoize(ttl=TTLValue(5, TimeUnit.SECONDS))
            async def read(self, userId): ...
        """
        return memoization.memoize(self, ttl, args_by_key)

    def invalidate_memoized(self, args_by_key: memoization.ArgsByKey | None = None) -> Callable:
        """Decorator deleting the cached result before the function runs."""
        return memoization.invalidate_memoized(self, args_by_key)

    def update_memoized(self, ttl: TTLSpec, args_by_key: memoization.ArgsByKey | None = None) -> Callable:
        """Decorator refreshing the cached result after the function runs."""
        return memoization.update_memoized(self, ttl, args_by_key)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Start background maintenance (eviction index sweep in width-bounded mode)."""
        if isinstance(self._remote, BoundedRedisStore):
            self._remote.start()

    async def close(self) -> None:
        """
        Stop background maintenance and drop the local tier.

        The Redis client is owned by the caller and stays open.
        """
        if isinstance(self._remote, BoundedRedisStore):
            await self._remote.stop()
        await self._local.clear()

    async def __aenter__(self) -> "SugarCache":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    def stats(self) -> dict[str, Any]:
        """
        Get cache performance statistics.

        Returns:
            Dict with hit/miss counts, hit rates and local tier size
        """
        return {
            **self._observer.get_stats(),
            "namespace": self._namespace,
            "mode": "bounded" if self.width is not None else "multilevel",
            "width": self.width,
            "local_enabled": self._local.enabled,
            "local_size": self._local.size(),
        }

    async def health_check(self) -> dict[str, Any]:
        """
        Ping Redis and report cache state.

        Returns:
            Dict with Redis status, latency and cache stats
        """
        redis_health = await self._remote.health_check()
        return {
            "status": redis_health["status"],
            "redis": redis_health,
            "cache": self.stats(),
        }
