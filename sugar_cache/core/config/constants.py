"""
System Constants and Enumerations

This module defines the constants and enumerations shared across the
two-tier cache client.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for key layout and magic numbers
- Type-safe enums for tiers, TTL units and eviction schemes
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Cache operation stages used in structured log events.

    Format: {LAYER}.{OPERATION}
    """

    CACHE_INIT = "CACHE.INIT"
    CACHE_GET = "CACHE.GET"
    CACHE_SET = "CACHE.SET"
    CACHE_DELETE = "CACHE.DEL"
    CACHE_CLEAR = "CACHE.CLEAR"
    CACHE_BATCH = "CACHE.BATCH"

    LOCAL_SET = "LOCAL.SET"
    LOCAL_EXPIRE = "LOCAL.EXPIRE"

    REMOTE_READ = "REMOTE.READ"
    REMOTE_WRITE = "REMOTE.WRITE"
    REMOTE_CLEAR = "REMOTE.CLEAR"
    REMOTE_EVICT = "REMOTE.EVICT"
    REMOTE_SWEEP = "REMOTE.SWEEP"

    MEMO_DECORATE = "MEMO.DECORATE"
    MEMO_HIT = "MEMO.HIT"
    MEMO_COMPUTE = "MEMO.COMPUTE"
    MEMO_POPULATE = "MEMO.POPULATE"
    MEMO_INVALIDATE = "MEMO.INVALIDATE"

    REDIS_CONNECT = "REDIS.CONNECT"
    REDIS_DISCONNECT = "REDIS.DISCONNECT"


# ============================================================================
# Cache Tiers
# ============================================================================


class CacheTier(str, Enum):
    """
    Cache tiers.

    MEMORY: process-local mapping (lost on restart)
    REDIS: shared remote store
    """

    MEMORY = "memory"
    REDIS = "redis"


# ============================================================================
# TTL Units
# ============================================================================


class TimeUnit(str, Enum):
    """Units accepted by unit-qualified TTLs."""

    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"


MILLISECONDS_PER_UNIT: dict[TimeUnit, int] = {
    TimeUnit.MILLISECONDS: 1,
    TimeUnit.SECONDS: 1000,
    TimeUnit.MINUTES: 1000 * 60,
    TimeUnit.HOURS: 1000 * 60 * 60,
    TimeUnit.DAYS: 1000 * 60 * 60 * 24,
}


# ============================================================================
# Eviction (width-bounded mode)
# ============================================================================


class EvictionScheme(str, Enum):
    """
    Ranking schemes for the width-bounded eviction index.

    Only LRU is implemented; LFU is reserved.
    """

    LRU = "LRU"
    LFU = "LFU"


class RedisScoreBound(str, Enum):
    """Open bounds for sorted-set score ranges."""

    MAX = "+inf"
    MIN = "-inf"


# ============================================================================
# Key Layout
# ============================================================================

KEY_SEPARATOR = ":"
HASHTAG_TEMPLATE = "{{{value}}}"

REMOTE_ENTRY_SEGMENT = "cache"
LOCAL_ENTRY_SEGMENT = "memory"
EVICTION_INDEX_SEGMENT = "scoreSet"

# ============================================================================
# Defaults
# ============================================================================

DEFAULT_KEY_PREFIX = "sugar-cache"
DEFAULT_NAMESPACE = "default"
DEFAULT_MEMORY_THRESHOLD = 0.5  # fraction of system memory held by this process
DEFAULT_INDEX_SWEEP_INTERVAL = 60  # seconds

# Truncate keys in log events
LOG_KEY_PREVIEW_LENGTH = 64
