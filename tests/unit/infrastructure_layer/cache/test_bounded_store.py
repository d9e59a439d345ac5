"""
Unit Tests for BoundedRedisStore

Tests LRU eviction over the width, recency updates on read, stale index
cleanup and the background index sweep.
"""

import asyncio

import pytest
from redis.exceptions import ResponseError

from sugar_cache.core.config.constants import EvictionScheme
from sugar_cache.core.exceptions import CacheTransportError, ConfigurationError
from sugar_cache.infrastructure.cache.bounded_store import BoundedRedisStore
from tests.test_fixtures import CacheTestFactory, FakeRedis

NAMESPACE = "sugar-cache:bounded"
INDEX = "sugar-cache:bounded:scoreSet"


def make_store(redis, width=3, **kwargs) -> BoundedRedisStore:
    return BoundedRedisStore(redis, NAMESPACE, CacheTestFactory.observer(NAMESPACE), width=width, **kwargs)


def entry(key: str) -> str:
    return f"{NAMESPACE}:cache:{key}"


@pytest.mark.unit
class TestConfiguration:
    @pytest.mark.parametrize("width", [0, -1])
    def test_width_must_be_positive(self, fake_redis, width):
        with pytest.raises(ConfigurationError):
            make_store(fake_redis, width=width)

    def test_lfu_not_supported(self, fake_redis):
        with pytest.raises(ConfigurationError):
            make_store(fake_redis, scheme=EvictionScheme.LFU)

    def test_score_is_negative_now(self, fake_redis, clock):
        store = make_store(fake_redis)
        assert store.score() == -(clock.now)

    def test_scores_strictly_decrease_within_a_tick(self, fake_redis, frozen_clock):
        store = make_store(fake_redis)
        first, second, third = store.score(), store.score(), store.score()

        assert first == -frozen_clock
        assert first > second > third


@pytest.mark.unit
class TestEviction:
    async def test_same_tick_writes_evict_oldest(self, fake_redis, frozen_clock):
        store = make_store(fake_redis, width=2)

        for key in ["a", "b", "c"]:
            await store.set(key, key.upper(), 10_000)

        assert fake_redis.raw(entry("a")) is None
        assert fake_redis.index(INDEX) == [entry("c"), entry("b")]

    async def test_same_tick_batch_keeps_last_written(self, fake_redis, frozen_clock):
        store = make_store(fake_redis, width=2)

        await store.batch_set(["a", "b", "c"], ["A", "B", "C"], 10_000)

        assert await store.batch_get(["a", "b", "c"]) == [None, "B", "C"]

    async def test_back_to_back_writes_with_real_clock(self, fake_redis):
        store = make_store(fake_redis, width=2)

        for key in ["a", "b", "c"]:
            await store.set(key, key.upper(), 10_000)

        assert [fake_redis.raw(entry(k)) for k in ["a", "b", "c"]] == [None, '"B"', '"C"']

    async def test_width_plus_one_evicts_oldest(self, fake_redis, clock):
        store = make_store(fake_redis, width=3)

        for key in ["a", "b", "c", "d"]:
            await store.set(key, key.upper(), 10_000)

        assert await store.get("a") is None
        assert [await store.get(k) for k in ["b", "c", "d"]] == ["B", "C", "D"]
        assert fake_redis.raw(entry("a")) is None
        assert entry("a") not in fake_redis.index(INDEX)

    async def test_index_ranks_most_recent_first(self, fake_redis, clock):
        store = make_store(fake_redis, width=5)

        for key in ["a", "b", "c"]:
            await store.set(key, key, 10_000)

        assert fake_redis.index(INDEX) == [entry("c"), entry("b"), entry("a")]

    async def test_read_refreshes_recency(self, fake_redis, clock):
        store = make_store(fake_redis, width=2)
        await store.set("a", "A", 10_000)
        await store.set("b", "B", 10_000)

        await store.get("a")
        await store.set("c", "C", 10_000)

        assert fake_redis.raw(entry("a")) is not None
        assert fake_redis.raw(entry("b")) is None

    async def test_set_runs_as_transaction(self, fake_redis, clock):
        store = make_store(fake_redis)

        await store.set("a", "A", 1000)

        assert fake_redis.pipelines[0] == (True, ["set", "zadd", "zrange"])

    async def test_batch_set_evicts_once(self, fake_redis, clock):
        store = make_store(fake_redis, width=2)

        await store.batch_set(["a", "b", "c"], [1, 2, 3], 10_000)

        assert len(fake_redis.index(INDEX)) == 2
        assert fake_redis.pipelines[-1][1] == ["zrem", "delete"]

    async def test_eviction_error_element_raises(self, fake_redis, clock):
        store = make_store(fake_redis, width=1)
        await store.set("a", "A", 10_000)
        fake_redis.errors["zrem"] = ResponseError("WRONGTYPE")

        with pytest.raises(CacheTransportError):
            await store.set("b", "B", 10_000)


@pytest.mark.unit
class TestReadsAndDeletes:
    async def test_expired_value_drops_index_entry(self, clock):
        now = [100.0]
        redis = FakeRedis(clock=lambda: now[0])
        store = make_store(redis)
        await store.set("a", "A", 1000)

        now[0] += 2.0

        assert await store.get("a") is None
        assert redis.index(INDEX) == []

    async def test_batch_get_drops_stale_entries(self, fake_redis, clock):
        store = make_store(fake_redis)
        await store.set("a", "A", 10_000)

        values = await store.batch_get(["a", "never"])

        assert values == ["A", None]
        assert fake_redis.index(INDEX) == [entry("a")]

    async def test_delete_removes_value_and_index(self, fake_redis, clock):
        store = make_store(fake_redis)
        await store.set("a", "A", 10_000)

        await store.delete("a")

        assert fake_redis.raw(entry("a")) is None
        assert fake_redis.index(INDEX) == []

    async def test_batch_delete(self, fake_redis, clock):
        store = make_store(fake_redis)
        await store.batch_set(["a", "b"], [1, 2], 10_000)

        await store.batch_delete(["a", "b"])

        assert fake_redis.index(INDEX) == []
        assert await store.batch_get(["a", "b"]) == [None, None]

    async def test_clear_removes_index(self, fake_redis, clock):
        store = make_store(fake_redis)
        await store.batch_set(["a", "b"], [1, 2], 10_000)

        await store.clear()

        assert fake_redis.stored_keys() == []


@pytest.mark.unit
class TestSweep:
    async def test_sweep_removes_members_older_than_ttl(self, fake_redis, clock):
        store = make_store(fake_redis, width=10, ttl_ms=500)
        await store.set("old", 1, 10_000)
        clock.now += 1000
        await store.set("new", 2, 10_000)

        removed = await store.sweep()

        assert removed == 1
        assert fake_redis.index(INDEX) == [entry("new")]

    async def test_sweep_without_ttl_is_noop(self, fake_redis):
        assert await make_store(fake_redis).sweep() == 0
        assert "zremrangebyscore" not in fake_redis.commands

    async def test_background_sweep_lifecycle(self, fake_redis):
        store = make_store(fake_redis, ttl_ms=500, sweep_interval=0.01)

        store.start()
        await asyncio.sleep(0.05)

        assert store.sweeping
        assert "zremrangebyscore" in fake_redis.commands

        await store.stop()
        assert not store.sweeping

    async def test_start_without_ttl_does_nothing(self, fake_redis):
        store = make_store(fake_redis)

        store.start()

        assert not store.sweeping
        await store.stop()

    async def test_sweep_failures_do_not_stop_task(self, fake_redis):
        fake_redis.errors["zremrangebyscore"] = ResponseError("LOADING")
        store = make_store(fake_redis, ttl_ms=500, sweep_interval=0.01)

        store.start()
        await asyncio.sleep(0.05)

        assert store.sweeping
        assert fake_redis.commands.count("zremrangebyscore") >= 2
        await store.stop()
