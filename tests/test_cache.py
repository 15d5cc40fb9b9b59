"""Tests for the background-refreshed weather feed cache."""

import asyncio

import pytest

from nightscope.storage.cache import DEFAULT_INTERVALS, WeatherFeedCache
from nightscope.weather.models import FeedKind

POINT = FeedKind.POINT_OBSERVATION
CLOUD = FeedKind.CLOUD_GRID


class CountingFetcher:
    """Async fetcher that returns successive values and counts calls."""

    def __init__(self, *values, gate: asyncio.Event | None = None, error: Exception | None = None):
        self.values = list(values)
        self.gate = gate
        self.error = error
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.values[min(self.calls, len(self.values)) - 1]


async def wait_until(predicate, attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0.005)
    raise AssertionError("condition not reached")


class TestRefresh:
    """Test single refreshes."""

    def test_defaults(self):
        assert DEFAULT_INTERVALS[POINT] == 300
        assert DEFAULT_INTERVALS[CLOUD] == 600
        cache = WeatherFeedCache({POINT: CountingFetcher("a")})
        assert cache.interval(POINT) == 300
        assert cache.kinds == [POINT]

    def test_get_before_first_fetch(self):
        fetcher = CountingFetcher("a")
        cache = WeatherFeedCache({POINT: fetcher})
        assert cache.get(POINT) is None
        assert cache.get(CLOUD) is None
        assert fetcher.calls == 0

    async def test_refresh_stores_value(self):
        cache = WeatherFeedCache({POINT: CountingFetcher("first")})
        assert await cache.refresh(POINT) is True
        cached = cache.get(POINT)
        assert cached is not None
        assert cached.value == "first"
        assert cached.age_seconds >= 0

    async def test_refresh_replaces_value(self):
        cache = WeatherFeedCache({POINT: CountingFetcher("first", "second")})
        await cache.refresh(POINT)
        await cache.refresh(POINT)
        assert cache.get(POINT).value == "second"

    async def test_unregistered_kind(self):
        cache = WeatherFeedCache({POINT: CountingFetcher("a")})
        with pytest.raises(KeyError):
            await cache.refresh(CLOUD)

    async def test_concurrent_refresh_fetches_once(self):
        gate = asyncio.Event()
        fetcher = CountingFetcher("value", gate=gate)
        cache = WeatherFeedCache({POINT: fetcher})

        first = asyncio.create_task(cache.refresh(POINT))
        await asyncio.sleep(0)
        assert cache.is_refreshing(POINT)

        assert await cache.refresh(POINT) is False
        gate.set()
        assert await first is True

        assert fetcher.calls == 1
        assert not cache.is_refreshing(POINT)

    async def test_failure_keeps_last_value(self):
        fetcher = CountingFetcher("good")
        cache = WeatherFeedCache({POINT: fetcher})
        await cache.refresh(POINT)
        fetched_at = cache.get(POINT).fetched_at

        fetcher.error = RuntimeError("feed down")
        assert await cache.refresh(POINT) is False
        assert cache.get(POINT).value == "good"
        assert cache.get(POINT).fetched_at == fetched_at
        assert not cache.is_refreshing(POINT)

    async def test_failure_before_any_value(self):
        cache = WeatherFeedCache({POINT: CountingFetcher(error=RuntimeError("feed down"))})
        assert await cache.refresh(POINT) is False
        assert cache.get(POINT) is None

    async def test_timeout_clears_flag(self):
        never = asyncio.Event()
        cache = WeatherFeedCache({POINT: CountingFetcher("late", gate=never)}, timeout=0.01)
        assert await cache.refresh(POINT) is False
        assert cache.get(POINT) is None
        assert not cache.is_refreshing(POINT)

    async def test_refresh_all(self):
        cache = WeatherFeedCache(
            {
                POINT: CountingFetcher("point"),
                CLOUD: CountingFetcher(error=RuntimeError("grid down")),
            }
        )
        results = await cache.refresh_all()
        assert results == {POINT: True, CLOUD: False}
        assert cache.get(POINT).value == "point"
        assert cache.get(CLOUD) is None


class TestLifecycle:
    """Test the background refresh loops."""

    async def test_start_refreshes_immediately(self):
        fetcher = CountingFetcher("point")
        cache = WeatherFeedCache({POINT: fetcher}, intervals={POINT: 60})
        cache.start()
        try:
            assert cache.running
            await wait_until(lambda: cache.get(POINT) is not None)
            assert cache.get(POINT).value == "point"
        finally:
            await cache.stop()
        assert not cache.running

    async def test_loop_repeats_on_interval(self):
        fetcher = CountingFetcher("a", "b", "c")
        cache = WeatherFeedCache({POINT: fetcher}, intervals={POINT: 0.01})
        cache.start()
        try:
            await wait_until(lambda: fetcher.calls >= 3)
        finally:
            await cache.stop()
        assert cache.get(POINT).value in ("b", "c")

    async def test_loop_survives_failures(self):
        fetcher = CountingFetcher(error=RuntimeError("feed down"))
        cache = WeatherFeedCache({POINT: fetcher}, intervals={POINT: 0.01})
        cache.start()
        try:
            await wait_until(lambda: fetcher.calls >= 2)
            fetcher.error = None
            fetcher.values = ["recovered"]
            await wait_until(lambda: cache.get(POINT) is not None)
        finally:
            await cache.stop()
        assert cache.get(POINT).value == "recovered"

    async def test_start_is_idempotent(self):
        fetcher = CountingFetcher("a")
        cache = WeatherFeedCache({POINT: fetcher}, intervals={POINT: 60})
        cache.start()
        cache.start()
        try:
            await wait_until(lambda: cache.get(POINT) is not None)
            await asyncio.sleep(0.02)
            assert fetcher.calls == 1
        finally:
            await cache.stop()

    async def test_stop_without_start(self):
        cache = WeatherFeedCache({POINT: CountingFetcher("a")})
        await cache.stop()
        assert not cache.running
