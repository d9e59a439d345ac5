"""
TTL Normalisation

Callers may express a time-to-live as:
- a number of milliseconds
- a ``datetime.timedelta``
- a unit-qualified ``TTLValue`` (or ``{"value": ..., "unit": ...}``)
- a per-tier ``TieredTTL`` (or ``{"redis": ..., "memory": ...}``) whose
  sides are any of the above

Everything resolves to a ``ResolvedTTL`` of whole milliseconds per tier.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Union

from sugar_cache.core.config.constants import MILLISECONDS_PER_UNIT, TimeUnit
from sugar_cache.core.exceptions import InvalidTTLError


@dataclass(frozen=True)
class TTLValue:
    """A duration with an explicit unit, e.g. ``TTLValue(5, TimeUnit.MINUTES)``."""

    value: float
    unit: TimeUnit | str = TimeUnit.MILLISECONDS


@dataclass(frozen=True)
class TieredTTL:
    """Separate durations for the Redis and memory tiers."""

    redis: "TTL"
    memory: "TTL"


@dataclass(frozen=True)
class ResolvedTTL:
    """TTL pair in milliseconds, as consumed by the multilevel cache."""

    redis_ms: int
    memory_ms: int


TTL = Union[int, float, timedelta, TTLValue, Mapping[str, Any]]
TTLSpec = Union[TTL, TieredTTL, ResolvedTTL]


def to_milliseconds(ttl: TTL) -> int:
    """
    Convert a single-tier TTL to whole milliseconds.

    Raises:
        InvalidTTLError: If the unit is unknown or the duration is not positive
    """
    if isinstance(ttl, bool):
        raise InvalidTTLError("TTL must be a duration, not a boolean", details={"ttl": ttl})

    if isinstance(ttl, Mapping):
        if set(ttl) != {"value", "unit"}:
            raise InvalidTTLError("TTL mapping must have 'value' and 'unit'", details={"ttl": dict(ttl)})
        ttl = TTLValue(value=ttl["value"], unit=ttl["unit"])

    if isinstance(ttl, TTLValue):
        try:
            unit = TimeUnit(ttl.unit)
        except ValueError as e:
            raise InvalidTTLError(
                f"Incorrect TTL unit {ttl.unit!r}",
                details={"allowed": [u.value for u in TimeUnit]},
            ) from e
        millis = ttl.value * MILLISECONDS_PER_UNIT[unit]
    elif isinstance(ttl, timedelta):
        millis = ttl.total_seconds() * 1000
    elif isinstance(ttl, int | float):
        millis = ttl
    else:
        raise InvalidTTLError(f"Unsupported TTL type {type(ttl).__name__}")

    if not math.isfinite(millis) or millis < 1:
        raise InvalidTTLError("TTL must be at least one millisecond", details={"ttl_ms": millis})
    return int(millis)


def resolve_ttl(ttl: TTLSpec) -> ResolvedTTL:
    """
    Normalise any accepted TTL form into a per-tier pair.

    A single duration applies to both tiers.
    """
    if isinstance(ttl, ResolvedTTL):
        return ttl

    if isinstance(ttl, TieredTTL):
        return ResolvedTTL(redis_ms=to_milliseconds(ttl.redis), memory_ms=to_milliseconds(ttl.memory))

    if isinstance(ttl, Mapping) and set(ttl) == {"redis", "memory"}:
        return ResolvedTTL(
            redis_ms=to_milliseconds(ttl["redis"]), memory_ms=to_milliseconds(ttl["memory"])
        )

    millis = to_milliseconds(ttl)
    return ResolvedTTL(redis_ms=millis, memory_ms=millis)
