"""
Test Fixtures Package

Shared test doubles and helpers for consistent testing across all modules.
"""

from .cache_factory import CacheTestFactory
from .fake_redis import FakeNode, FakePipeline, FakeRedis, FakeRedisCluster

__all__ = ["CacheTestFactory", "FakeNode", "FakePipeline", "FakeRedis", "FakeRedisCluster"]
