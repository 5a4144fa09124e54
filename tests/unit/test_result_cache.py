"""
Unit tests for the Result Cache.
"""

import asyncio

import pytest

from src.application.services.result_cache import ResultCache, make_cache_key
from src.domain.exceptions import UpstreamError
from src.domain.models import SearchResult, SearchResultItem


def _result(query: str = "q", n: int = 1) -> SearchResult:
    items = [SearchResultItem(title=f"T{i}", url=f"https://e.com/{i}", source="mock") for i in range(n)]
    return SearchResult.from_items(query, items)


class Counter:
    """Async compute function that counts its invocations."""

    def __init__(self, value: SearchResult, delay: float = 0.0, error: Exception = None):
        self.calls = 0
        self._value = value
        self._delay = delay
        self._error = error

    async def __call__(self) -> SearchResult:
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error is not None:
            raise self._error
        return self._value


class TestCacheKey:
    """Tests for make_cache_key."""

    def test_same_text_and_count_same_key(self):
        assert make_cache_key("rust ownership", 5) == make_cache_key("rust ownership", 5)

    def test_count_changes_key(self):
        assert make_cache_key("rust ownership", 5) != make_cache_key("rust ownership", 6)

    def test_text_changes_key(self):
        assert make_cache_key("rust", 5) != make_cache_key("Rust", 5)

    def test_no_ambiguity_between_text_and_count(self):
        assert make_cache_key("a-1", 2) != make_cache_key("a", 12)


class TestResultCacheBasics:
    """Tests for hits, misses and TTL."""

    @pytest.mark.asyncio
    async def test_second_call_is_hit(self, result_cache):
        compute = Counter(_result())

        first = await result_cache.get_or_compute("k", compute)
        second = await result_cache.get_or_compute("k", compute)

        assert first == second
        assert compute.calls == 1
        stats = result_cache.stats()
        assert stats.hits == 1
        assert stats.misses == 1

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, result_cache, fake_clock):
        compute = Counter(_result())

        await result_cache.get_or_compute("k", compute)
        fake_clock.advance(299)
        await result_cache.get_or_compute("k", compute)
        assert compute.calls == 1

        fake_clock.advance(1)
        await result_cache.get_or_compute("k", compute)
        assert compute.calls == 2
        assert result_cache.stats().expirations == 1

    @pytest.mark.asyncio
    async def test_reads_do_not_extend_lifetime(self, result_cache, fake_clock):
        compute = Counter(_result())
        await result_cache.get_or_compute("k", compute)

        for _ in range(5):
            fake_clock.advance(50)
            assert result_cache.get("k") is not None

        fake_clock.advance(50)
        assert result_cache.get("k") is None

    def test_get_missing_returns_none(self, result_cache):
        assert result_cache.get("absent") is None
        assert result_cache.stats().misses == 1

    def test_rejects_invalid_bounds(self):
        with pytest.raises(ValueError):
            ResultCache(ttl_seconds=0)
        with pytest.raises(ValueError):
            ResultCache(max_entries=0)

    def test_clear_drops_entries(self, result_cache):
        result_cache.put("a", _result())
        result_cache.clear()
        assert len(result_cache) == 0


class TestResultCacheEviction:
    """Tests for capacity-based eviction."""

    def test_least_recently_used_is_evicted(self, fake_clock):
        cache = ResultCache(ttl_seconds=300, max_entries=2, clock=fake_clock)
        cache.put("a", _result("a"))
        cache.put("b", _result("b"))

        # Touch "a" so "b" becomes the eviction candidate
        assert cache.get("a") is not None
        cache.put("c", _result("c"))

        assert cache.get("b") is None
        assert cache.get("a") is not None
        assert cache.get("c") is not None
        assert cache.stats().evictions == 1
        assert len(cache) == 2

    def test_size_never_exceeds_capacity(self, fake_clock):
        cache = ResultCache(ttl_seconds=300, max_entries=10, clock=fake_clock)
        for i in range(50):
            cache.put(f"k{i}", _result(str(i)))

        stats = cache.stats()
        assert stats.size == 10
        assert stats.evictions == 40

    def test_expired_entries_are_purged_before_evicting(self, fake_clock):
        cache = ResultCache(ttl_seconds=10, max_entries=2, clock=fake_clock)
        cache.put("old", _result("old"))
        fake_clock.advance(5)
        cache.put("fresh", _result("fresh"))
        fake_clock.advance(6)

        cache.put("new", _result("new"))

        assert cache.get("fresh") is not None
        assert cache.stats().evictions == 0
        assert cache.stats().expirations == 1


class TestResultCacheFailures:
    """Failures must never populate the cache."""

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, result_cache):
        failing = Counter(_result(), error=UpstreamError("boom", provider="mock"))

        with pytest.raises(UpstreamError):
            await result_cache.get_or_compute("k", failing)
        with pytest.raises(UpstreamError):
            await result_cache.get_or_compute("k", failing)

        assert failing.calls == 2
        assert len(result_cache) == 0

    @pytest.mark.asyncio
    async def test_success_after_failure_is_cached(self, result_cache):
        failing = Counter(_result(), error=UpstreamError("boom", provider="mock"))
        with pytest.raises(UpstreamError):
            await result_cache.get_or_compute("k", failing)

        ok = Counter(_result())
        await result_cache.get_or_compute("k", ok)
        await result_cache.get_or_compute("k", ok)
        assert ok.calls == 1


class TestResultCacheSingleFlight:
    """Concurrent misses for one key share a computation."""

    @pytest.mark.asyncio
    async def test_concurrent_misses_compute_once(self, result_cache):
        compute = Counter(_result(), delay=0.01)

        results = await asyncio.gather(
            *(result_cache.get_or_compute("k", compute) for _ in range(5))
        )

        assert compute.calls == 1
        assert all(r == results[0] for r in results)
        assert result_cache.stats().coalesced == 4

    @pytest.mark.asyncio
    async def test_different_keys_compute_independently(self, result_cache):
        compute = Counter(_result(), delay=0.01)

        await asyncio.gather(
            result_cache.get_or_compute("a", compute),
            result_cache.get_or_compute("b", compute),
        )

        assert compute.calls == 2

    @pytest.mark.asyncio
    async def test_all_waiters_see_the_failure(self, result_cache):
        failing = Counter(_result(), delay=0.01, error=UpstreamError("boom", provider="mock"))

        outcomes = await asyncio.gather(
            *(result_cache.get_or_compute("k", failing) for _ in range(3)),
            return_exceptions=True,
        )

        assert failing.calls == 1
        assert all(isinstance(o, UpstreamError) for o in outcomes)
        assert len(result_cache) == 0

    @pytest.mark.asyncio
    async def test_cancelling_last_waiter_cancels_computation(self, result_cache):
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def hang() -> SearchResult:
            started.set()
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                cancelled.set()
                raise
            return _result()

        caller = asyncio.create_task(result_cache.get_or_compute("k", hang))
        await started.wait()
        caller.cancel()

        with pytest.raises(asyncio.CancelledError):
            await caller
        await asyncio.wait_for(cancelled.wait(), timeout=1)

        assert len(result_cache) == 0
        # The key is usable again afterwards
        compute = Counter(_result())
        await result_cache.get_or_compute("k", compute)
        assert compute.calls == 1

    @pytest.mark.asyncio
    async def test_caller_after_cancelled_flight_starts_new_computation(self, result_cache):
        started = asyncio.Event()
        calls = 0

        async def slow() -> SearchResult:
            nonlocal calls
            calls += 1
            started.set()
            await asyncio.sleep(0.05)
            return _result()

        first = asyncio.create_task(result_cache.get_or_compute("k", slow))
        await started.wait()
        first.cancel()
        # Arrives while the abandoned computation is still winding down
        second = asyncio.create_task(result_cache.get_or_compute("k", slow))

        value = await second
        with pytest.raises(asyncio.CancelledError):
            await first

        assert isinstance(value, SearchResult)
        assert value == _result()
        assert calls == 2
        assert result_cache.get("k") == value

    @pytest.mark.asyncio
    async def test_cancelling_one_waiter_keeps_others(self, result_cache):
        compute = Counter(_result(), delay=0.05)

        first = asyncio.create_task(result_cache.get_or_compute("k", compute))
        second = asyncio.create_task(result_cache.get_or_compute("k", compute))
        await asyncio.sleep(0.01)
        first.cancel()

        value = await second
        with pytest.raises(asyncio.CancelledError):
            await first

        assert value == _result()
        assert compute.calls == 1
        assert result_cache.get("k") == value
