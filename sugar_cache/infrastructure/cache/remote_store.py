"""
Remote (Redis) cache tier.

Responsibility: shared, durable storage with native TTL expiry.

Key layout:
    <namespace>:cache:<composed key>

Why pipelines?
- Batched operations queue every command and execute them in a single
  round trip, regardless of batch size
- On a single node the pipeline runs as MULTI/EXEC; on a cluster it is a
  plain pipeline because keys may live in different slots

Error Handling Strategy:
- Pipelines run with ``raise_on_error=False``; any error element in the
  replies becomes ``CacheTransportError`` (nothing is retried)
- Redis exceptions from direct commands are wrapped the same way
- Values that cannot be parsed on read are misses, never errors
"""

import re
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from redis.exceptions import RedisError

from sugar_cache.core.config.constants import (
    KEY_SEPARATOR,
    LOG_KEY_PREVIEW_LENGTH,
    REMOTE_ENTRY_SEGMENT,
    Stage,
)
from sugar_cache.core.exceptions import CacheTransportError
from sugar_cache.core.logging.logger import log_stage
from sugar_cache.core.observability import CacheObserver
from sugar_cache.infrastructure.cache import serialization
from sugar_cache.infrastructure.redis.connection import RedisConnection, is_cluster, ping_latency

SCAN_BATCH_SIZE = 500
READ_OPERATIONS = frozenset({"get", "batch_get"})
GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(text: str) -> str:
    """Escape Redis glob metacharacters so ``text`` only matches itself."""
    return GLOB_SPECIAL.sub(r"\\\1", text)


def _stage_for(operation: str) -> Stage:
    return Stage.REMOTE_READ if operation in READ_OPERATIONS else Stage.REMOTE_WRITE


class RedisStore:
    """
    Redis tier for the multilevel cache.

    Usage:
        store = RedisStore(redis_client, "sugar-cache:users", observer)
        await store.set("42", {"name": "a"}, ttl_ms=5000)
        await store.get("42")
    """

    def __init__(self, redis: RedisConnection, namespace: str, observer: CacheObserver):
        """
        Args:
            redis: Connected ``Redis`` or ``RedisCluster`` client (decode_responses=True)
            namespace: Effective namespace prefix
            observer: Metrics/logging sink
        """
        self._redis = redis
        self._namespace = namespace
        self._observer = observer
        self._cluster = is_cluster(redis)

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def cluster(self) -> bool:
        return self._cluster

    def entry_key(self, key: str) -> str:
        return f"{self._namespace}{KEY_SEPARATOR}{REMOTE_ENTRY_SEGMENT}{KEY_SEPARATOR}{key}"

    # -------------------------------------------------------------------------
    # Command execution helpers
    # -------------------------------------------------------------------------

    @contextmanager
    def _transport(self, operation: str, **details) -> Iterator[None]:
        """Wrap redis-py failures as ``CacheTransportError``."""
        try:
            yield
        except RedisError as e:
            self._observer.logger.error(
                "Redis operation failed",
                stage=_stage_for(operation).value,
                operation=operation,
                error=str(e),
            )
            raise CacheTransportError.from_exception(
                e,
                message=f"Redis {operation} failed: {e}",
                operation=operation,
                namespace=self._namespace,
                **details,
            ) from e

    def _pipeline(self):
        """MULTI/EXEC on a single node; plain pipeline on a cluster."""
        return self._redis.pipeline(transaction=not self._cluster)

    async def _execute(self, pipe, operation: str) -> list[Any]:
        """
        Execute a pipeline and check every reply.

        Raises:
            CacheTransportError: If execution fails or any reply is an error
        """
        with self._transport(operation):
            results = await pipe.execute(raise_on_error=False)

        for index, result in enumerate(results):
            if isinstance(result, Exception):
                self._observer.logger.error(
                    "Error element in Redis reply",
                    stage=_stage_for(operation).value,
                    operation=operation,
                    command_index=index,
                    error=str(result),
                )
                raise CacheTransportError.from_exception(
                    result,
                    message=f"Redis {operation} returned an error: {result}",
                    operation=operation,
                    namespace=self._namespace,
                    command_index=index,
                )
        return results

    def _decode(self, key: str, raw: Any) -> Any | None:
        value = serialization.loads(raw)
        if serialization.is_missing(value):
            if raw is not None:
                log_stage(
                    self._observer.logger,
                    Stage.REMOTE_READ,
                    "Stored value could not be parsed, treating as miss",
                    level="debug",
                    cache_key=key[:LOG_KEY_PREVIEW_LENGTH],
                )
            return None
        return value

    # -------------------------------------------------------------------------
    # Point operations
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        entry_key = self.entry_key(key)
        with self._transport("get", key=entry_key):
            raw = await self._redis.get(entry_key)
        return self._decode(entry_key, raw)

    async def set(self, key: str, value: Any, ttl_ms: int | None) -> None:
        """
        Store a value with ``SET ... PX ttl``.

        Raises:
            CacheSerializationError: If the value cannot be serialized
            CacheTransportError: If Redis rejects the write
        """
        entry_key = self.entry_key(key)
        payload = serialization.dumps(value)
        with self._transport("set", key=entry_key):
            await self._redis.set(entry_key, payload, px=ttl_ms)
        self._observer.record_operation("set")

    async def delete(self, key: str) -> None:
        entry_key = self.entry_key(key)
        with self._transport("delete", key=entry_key):
            await self._redis.delete(entry_key)
        self._observer.record_operation("delete")

    # -------------------------------------------------------------------------
    # Batched operations (one round trip each)
    # -------------------------------------------------------------------------

    async def batch_get(self, keys: list[str]) -> list[Any | None]:
        if not keys:
            return []

        entry_keys = [self.entry_key(k) for k in keys]
        pipe = self._pipeline()
        for entry_key in entry_keys:
            pipe.get(entry_key)
        results = await self._execute(pipe, "batch_get")

        return [self._decode(k, raw) for k, raw in zip(entry_keys, results)]

    async def batch_set(self, keys: list[str], values: list[Any], ttl_ms: int | None) -> None:
        if not keys:
            return

        payloads = [serialization.dumps(v) for v in values]
        pipe = self._pipeline()
        for key, payload in zip(keys, payloads, strict=True):
            pipe.set(self.entry_key(key), payload, px=ttl_ms)
        await self._execute(pipe, "batch_set")
        self._observer.record_operation("set", len(keys))

    async def batch_delete(self, keys: list[str]) -> None:
        if not keys:
            return

        pipe = self._pipeline()
        for key in keys:
            pipe.delete(self.entry_key(key))
        await self._execute(pipe, "batch_delete")
        self._observer.record_operation("delete", len(keys))

    # -------------------------------------------------------------------------
    # Namespace clearing
    # -------------------------------------------------------------------------

    async def _namespace_keys(self) -> list[str]:
        """
        Enumerate every key under this namespace.

        On a cluster no single node owns the keyspace, so each primary is
        asked separately and the results concatenated.
        """
        pattern = f"{escape_glob(self._namespace)}{KEY_SEPARATOR}*"

        if self._cluster:
            keys: list[str] = []
            with self._transport("clear", pattern=pattern):
                for node in self._redis.get_primaries():
                    keys.extend(await self._redis.keys(pattern, target_nodes=node))
            return keys

        with self._transport("clear", pattern=pattern):
            return [k async for k in self._redis.scan_iter(match=pattern, count=SCAN_BATCH_SIZE)]

    async def clear(self) -> None:
        """
        Delete every key under the namespace.

        Expensive: walks the keyspace. Intended for tests and admin use.
        """
        candidates = await self._namespace_keys()
        log_stage(
            self._observer.logger,
            Stage.REMOTE_CLEAR,
            "Namespace deletion candidates collected",
            level="debug",
            candidates=len(candidates),
        )
        if not candidates:
            return

        if self._cluster:
            # keys span slots; delete one by one in a single pipeline
            pipe = self._pipeline()
            for key in candidates:
                pipe.delete(key)
            await self._execute(pipe, "clear")
        else:
            with self._transport("clear"):
                await self._redis.delete(*candidates)

        self._observer.record_operation("clear")
        log_stage(self._observer.logger, Stage.REMOTE_CLEAR, "Namespace keys removed", deleted=len(candidates))

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    async def health_check(self) -> dict[str, Any]:
        return await ping_latency(self._redis)
