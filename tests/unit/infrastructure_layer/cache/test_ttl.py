"""
Unit Tests for TTL Normalisation

Tests conversion of every accepted TTL form to milliseconds per tier.
"""

from datetime import timedelta

import pytest

from sugar_cache.core.config.constants import TimeUnit
from sugar_cache.core.exceptions import ConfigurationError, InvalidTTLError
from sugar_cache.infrastructure.cache.ttl import (
    ResolvedTTL,
    TieredTTL,
    TTLValue,
    resolve_ttl,
    to_milliseconds,
)


@pytest.mark.unit
class TestToMilliseconds:
    @pytest.mark.parametrize(
        "ttl, expected",
        [
            (1500, 1500),
            (2.9, 2),
            (timedelta(seconds=2), 2000),
            (TTLValue(5, TimeUnit.SECONDS), 5000),
            (TTLValue(2, "minutes"), 120_000),
            (TTLValue(1, TimeUnit.HOURS), 3_600_000),
            ({"value": 1, "unit": "days"}, 86_400_000),
        ],
    )
    def test_accepted_forms(self, ttl, expected):
        assert to_milliseconds(ttl) == expected

    def test_unknown_unit(self):
        with pytest.raises(InvalidTTLError) as exc_info:
            to_milliseconds(TTLValue(1, "weeks"))

        assert "seconds" in exc_info.value.details["allowed"]

    @pytest.mark.parametrize("ttl", [0, -5, 0.5, float("inf"), float("nan"), timedelta(0)])
    def test_non_positive_durations(self, ttl):
        with pytest.raises(InvalidTTLError):
            to_milliseconds(ttl)

    @pytest.mark.parametrize("ttl", [True, "1000", None, {"value": 1}])
    def test_unsupported_values(self, ttl):
        with pytest.raises(InvalidTTLError):
            to_milliseconds(ttl)

    def test_invalid_ttl_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            to_milliseconds(-1)


@pytest.mark.unit
class TestResolveTTL:
    def test_single_duration_applies_to_both_tiers(self):
        assert resolve_ttl(TTLValue(3, TimeUnit.SECONDS)) == ResolvedTTL(redis_ms=3000, memory_ms=3000)

    def test_tiered_ttl(self):
        resolved = resolve_ttl(TieredTTL(redis=TTLValue(1, TimeUnit.MINUTES), memory=500))

        assert resolved == ResolvedTTL(redis_ms=60_000, memory_ms=500)

    def test_tiered_mapping(self):
        resolved = resolve_ttl({"redis": 2000, "memory": {"value": 1, "unit": "seconds"}})

        assert resolved == ResolvedTTL(redis_ms=2000, memory_ms=1000)

    def test_resolved_passes_through(self):
        resolved = ResolvedTTL(redis_ms=10, memory_ms=20)
        assert resolve_ttl(resolved) is resolved

    def test_invalid_side_rejected(self):
        with pytest.raises(InvalidTTLError):
            resolve_ttl(TieredTTL(redis=1000, memory=0))
