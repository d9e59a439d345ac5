"""
Cache Metrics with Prometheus Integration

Process-wide Prometheus counters for cache activity. Exporter registration
(an HTTP endpoint, push gateway...) is left to the application.

Architectural Decision: prometheus-client for industry-standard metrics
- Compatible with Grafana dashboards
- Labels per namespace so several caches in one process stay separable
"""

from prometheus_client import Counter

# ============================================================================
# Metric Definitions
# ============================================================================

CACHE_HITS = Counter(
    'sugar_cache_hits_total',
    'Total cache hits',
    ['namespace', 'tier']  # memory or redis
)

CACHE_MISSES = Counter(
    'sugar_cache_misses_total',
    'Total reads answered by neither tier',
    ['namespace']
)

CACHE_OPERATIONS = Counter(
    'sugar_cache_operations_total',
    'Total cache operations by type',
    ['namespace', 'operation']
)

CACHE_EVICTIONS = Counter(
    'sugar_cache_evictions_total',
    'Entries evicted by the width-bounded index',
    ['namespace']
)

MEMORY_WRITES_SKIPPED = Counter(
    'sugar_cache_memory_writes_skipped_total',
    'Local tier writes dropped under memory pressure',
    ['namespace']
)
