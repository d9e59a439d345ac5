"""
Cache Observer

Tracks cache performance metrics and logs operations.

Why Separate Observer?
- Tiers and the multilevel cache stay free of logging/metrics plumbing
- Easy to test cache logic without logging
- Centralizes all observability concerns
"""

from typing import Any

from sugar_cache.core.config.constants import LOG_KEY_PREVIEW_LENGTH, CacheTier, Stage
from sugar_cache.core.logging.logger import get_logger, log_stage
from sugar_cache.core.observability.metrics import (
    CACHE_EVICTIONS,
    CACHE_HITS,
    CACHE_MISSES,
    CACHE_OPERATIONS,
    MEMORY_WRITES_SKIPPED,
)


class CacheObserver:
    """
    Records cache operations for metrics and logging.

    Metrics Tracked:
    - Memory hits, Redis hits, misses (in-process tally + Prometheus)
    - Operation counts, evictions, skipped local writes (Prometheus)
    """

    def __init__(self, namespace: str, logger_instance=None):
        """
        Args:
            namespace: Effective namespace prefix, used as a metric label
            logger_instance: Logger instance (defaults to a module logger)
        """
        self._namespace = namespace
        self._logger = logger_instance or get_logger(__name__).bind(namespace=namespace)

        self._hits_memory = 0
        self._hits_redis = 0
        self._misses = 0

    @property
    def logger(self):
        return self._logger

    def record_read(self, key: str, tier: CacheTier | None) -> None:
        """
        Record the outcome of a single read.

        Args:
            key: Composed key (truncated for logging)
            tier: Tier that answered, or None on a miss
        """
        preview = key[:LOG_KEY_PREVIEW_LENGTH]
        if tier is CacheTier.MEMORY:
            self._hits_memory += 1
            CACHE_HITS.labels(namespace=self._namespace, tier=tier.value).inc()
            log_stage(self._logger, Stage.CACHE_GET, "Memory tier hit", level="debug", cache_key=preview)
        elif tier is CacheTier.REDIS:
            self._hits_redis += 1
            CACHE_HITS.labels(namespace=self._namespace, tier=tier.value).inc()
            log_stage(self._logger, Stage.CACHE_GET, "Redis tier hit", level="debug", cache_key=preview)
        else:
            self._misses += 1
            CACHE_MISSES.labels(namespace=self._namespace).inc()
            log_stage(self._logger, Stage.CACHE_GET, "Cache miss", level="debug", cache_key=preview)

    def record_operation(self, operation: str, count: int = 1) -> None:
        """Count a write/delete/clear style operation."""
        CACHE_OPERATIONS.labels(namespace=self._namespace, operation=operation).inc(count)

    def record_evictions(self, keys: list[str]) -> None:
        if not keys:
            return
        CACHE_EVICTIONS.labels(namespace=self._namespace).inc(len(keys))
        log_stage(self._logger, Stage.REMOTE_EVICT, "Evicted entries over width", evicted=len(keys))

    def record_memory_skip(self, key: str, usage_ratio: float) -> None:
        MEMORY_WRITES_SKIPPED.labels(namespace=self._namespace).inc()
        log_stage(
            self._logger,
            Stage.LOCAL_SET,
            "Memory pressure over threshold, local write skipped",
            level="debug",
            cache_key=key[:LOG_KEY_PREVIEW_LENGTH],
            usage_ratio=round(usage_ratio, 3),
        )

    def get_stats(self) -> dict[str, Any]:
        """
        Get read statistics for this cache instance.

        Returns:
            Dict with per-tier hits, misses, totals and hit rates
        """
        total = self._hits_memory + self._hits_redis + self._misses
        hit_rate = (self._hits_memory + self._hits_redis) / total if total > 0 else 0.0

        return {
            "memory_hits": self._hits_memory,
            "redis_hits": self._hits_redis,
            "misses": self._misses,
            "total_reads": total,
            "hit_rate": round(hit_rate, 3),
            "memory_hit_rate": round(self._hits_memory / total, 3) if total > 0 else 0.0,
        }
