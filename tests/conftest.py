"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys
from unittest.mock import patch

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from tests.test_fixtures import CacheTestFactory, FakeRedis, FakeRedisCluster  # noqa: E402

# ============================================================================
# Pytest Configuration
# ============================================================================

# pytest-asyncio runs in auto mode (see pyproject.toml)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """
    Isolate tests from the environment and from each other.

    Clears cache-related environment variables and rebuilds the settings
    singleton so every test starts from defaults.
    """
    from sugar_cache.core.config import settings as settings_module

    for name in list(os.environ):
        if name.startswith(("CACHE_", "REDIS_", "LOG_")):
            monkeypatch.delenv(name, raising=False)
    settings_module._settings = None
    yield
    settings_module._settings = None


# ============================================================================
# Redis Doubles
# ============================================================================


@pytest.fixture
def fake_redis():
    """In-memory single-node Redis double."""
    return FakeRedis()


@pytest.fixture
def fake_cluster():
    """In-memory Redis Cluster double with three primaries."""
    return FakeRedisCluster(primaries=3)


# ============================================================================
# Cache Fixtures
# ============================================================================


@pytest.fixture
def cache_factory():
    return CacheTestFactory


@pytest.fixture
def observer():
    return CacheTestFactory.observer()


@pytest.fixture
def user_cache(fake_redis):
    """Multilevel cache keyed by ``userId`` in namespace ``users``."""
    return CacheTestFactory.cache(fake_redis, namespace="users", keys=["userId"])


@pytest.fixture
def clock():
    """
    Controllable millisecond clock for the width-bounded store.

    Each read advances by one millisecond so successive touches get
    distinct recency scores; ``clock.now`` can be moved by hand.
    """

    class Clock:
        def __init__(self):
            self.now = 1_000_000

        def __call__(self):
            self.now += 1
            return self.now

    ticking = Clock()
    with patch("sugar_cache.infrastructure.cache.bounded_store._now_ms", ticking):
        yield ticking


@pytest.fixture
def frozen_clock():
    """Millisecond clock that never advances: every touch lands in the same tick."""
    with patch("sugar_cache.infrastructure.cache.bounded_store._now_ms", return_value=1_000_000.0):
        yield 1_000_000.0
