"""
Tests for layeredconf.cache module.

Tests the value cache including:
- Memoization and None passthrough
- Single-flight computation under concurrency
- Daily expiry at local midnight
- Explicit clear and cache generations
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
import threading
import time

import pytest

from layeredconf.cache import ValueCache, next_midnight
from layeredconf.exceptions import MalformedContentError


class TestNextMidnight:
    """Tests for the expiration deadline helper."""

    def test_afternoon(self):
        """Test that the deadline is the following midnight."""
        assert next_midnight(datetime(2025, 3, 14, 15, 30)) == datetime(2025, 3, 15)

    def test_exactly_midnight(self):
        """Test that midnight itself rolls to the next day."""
        assert next_midnight(datetime(2025, 3, 14)) == datetime(2025, 3, 15)

    def test_month_end(self):
        """Test rollover across month and year boundaries."""
        assert next_midnight(datetime(2025, 12, 31, 23, 59)) == datetime(2026, 1, 1)

    def test_keeps_timezone(self):
        """Test that an aware datetime keeps its timezone."""
        now = datetime(2025, 3, 14, 8, tzinfo=timezone.utc)

        assert next_midnight(now).tzinfo is timezone.utc


class TestMemoization:
    """Tests for basic get_or_compute behavior."""

    def test_computes_once(self, clock):
        """Test that a hit does not recompute."""
        cache = ValueCache(clock=clock)
        calls = []

        def compute():
            calls.append(1)
            return {"a": 1}

        first = cache.get_or_compute("k", compute)
        second = cache.get_or_compute("k", compute)

        assert first is second
        assert len(calls) == 1
        assert "k" in cache
        assert len(cache) == 1

    def test_none_is_not_stored(self, clock):
        """Test that a not-found result is recomputed next time."""
        cache = ValueCache(clock=clock)
        calls = []

        def compute():
            calls.append(1)
            return None

        assert cache.get_or_compute("k", compute) is None
        assert cache.get_or_compute("k", compute) is None
        assert len(calls) == 2
        assert "k" not in cache

    def test_exception_is_not_stored(self, clock):
        """Test that a failed computation is retried on the next call."""
        cache = ValueCache(clock=clock)

        def fail():
            raise ValueError("boom")

        with pytest.raises(ValueError):
            cache.get_or_compute("k", fail)
        assert cache.get_or_compute("k", lambda: "ok") == "ok"

    def test_keys_are_independent(self, clock):
        """Test that different keys hold different values."""
        cache = ValueCache(clock=clock)

        cache.get_or_compute("a", lambda: 1)
        cache.get_or_compute("b", lambda: 2)

        assert cache.get_or_compute("a", lambda: 99) == 1
        assert cache.get_or_compute("b", lambda: 99) == 2


class TestSingleFlight:
    """Tests for concurrent misses."""

    def test_concurrent_callers_share_one_computation(self, clock):
        """Test that N parallel misses compute exactly once."""
        cache = ValueCache(clock=clock)
        workers = 8
        barrier = threading.Barrier(workers)
        calls = []

        def compute():
            calls.append(1)
            time.sleep(0.2)
            return object()

        def request():
            barrier.wait()
            return cache.get_or_compute("slow", compute)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda _: request(), range(workers)))

        assert len(calls) == 1
        assert all(r is results[0] for r in results)

    def test_waiters_receive_the_same_exception(self, clock):
        """Test that a failure is delivered to every waiting caller."""
        cache = ValueCache(clock=clock)
        workers = 4
        barrier = threading.Barrier(workers)
        calls = []

        def compute():
            calls.append(1)
            time.sleep(0.2)
            raise RuntimeError("broken config")

        def request():
            barrier.wait()
            try:
                cache.get_or_compute("slow", compute)
            except RuntimeError as err:
                return err
            return None

        with ThreadPoolExecutor(max_workers=workers) as pool:
            errors = list(pool.map(lambda _: request(), range(workers)))

        assert len(calls) == 1
        assert all(isinstance(e, RuntimeError) for e in errors)

    def test_waiters_get_their_own_chained_copy(self, clock):
        """Test that waiting threads never share the owner's exception object."""
        cache = ValueCache(clock=clock)
        workers = 4
        barrier = threading.Barrier(workers)

        def compute():
            time.sleep(0.2)
            raise MalformedContentError("bad yaml", source="/etc/app/service.yml")

        def request():
            barrier.wait()
            try:
                cache.get_or_compute("slow", compute)
            except MalformedContentError as err:
                return err
            return None

        with ThreadPoolExecutor(max_workers=workers) as pool:
            errors = list(pool.map(lambda _: request(), range(workers)))

        originals = [e for e in errors if e.__cause__ is None]
        copies = [e for e in errors if e.__cause__ is not None]
        assert len(originals) == 1
        assert len(copies) == workers - 1
        assert len({id(e) for e in errors}) == workers
        for err in copies:
            assert err.__cause__ is originals[0]
            assert err.source == "/etc/app/service.yml"
            assert str(err) == "bad yaml"
            assert err.__traceback__ is not originals[0].__traceback__

    def test_different_keys_compute_in_parallel(self, clock):
        """Test that a slow key does not block another key."""
        cache = ValueCache(clock=clock)
        release = threading.Event()

        def slow():
            release.wait(timeout=5)
            return "slow"

        with ThreadPoolExecutor(max_workers=1) as pool:
            pending = pool.submit(cache.get_or_compute, "slow", slow)
            assert cache.get_or_compute("fast", lambda: "fast") == "fast"
            release.set()
            assert pending.result(timeout=5) == "slow"

    def test_clear_during_computation_discards_result(self, clock):
        """Test that a value computed before a clear is not stored."""
        cache = ValueCache(clock=clock)
        started = threading.Event()
        release = threading.Event()

        def compute():
            started.set()
            release.wait(timeout=5)
            return "stale"

        with ThreadPoolExecutor(max_workers=1) as pool:
            pending = pool.submit(cache.get_or_compute, "k", compute)
            assert started.wait(timeout=5)
            cache.clear()
            release.set()
            assert pending.result(timeout=5) == "stale"

        assert "k" not in cache
        assert cache.get_or_compute("k", lambda: "fresh") == "fresh"


class TestExpiry:
    """Tests for daily expiry."""

    def test_first_access_sets_deadline(self, clock):
        """Test that the first read computes the next midnight."""
        cache = ValueCache(clock=clock)
        assert cache.deadline is None

        cache.get_or_compute("k", lambda: 1)

        assert cache.deadline == datetime(2025, 3, 15)

    def test_same_day_keeps_entries(self, clock):
        """Test that reads before midnight hit the cache."""
        cache = ValueCache(clock=clock)
        cache.get_or_compute("k", lambda: 1)

        clock.advance(hours=8, minutes=59)

        assert cache.get_or_compute("k", lambda: 2) == 1

    def test_crossing_midnight_clears(self, clock, recording_logger):
        """Test that the read after midnight recomputes its own entry."""
        cache = ValueCache(clock=clock, logger=recording_logger)
        cache.get_or_compute("k", lambda: 1)
        cache.get_or_compute("other", lambda: 1)

        clock.advance(hours=9, seconds=1)

        assert cache.get_or_compute("k", lambda: 2) == 2
        assert "other" not in cache
        assert cache.deadline == datetime(2025, 3, 16)
        assert "Daily config cache refresh" in recording_logger.text("verbose")

    def test_deadline_strictly_in_future(self, clock):
        """Test that a read exactly at midnight does not expire the cache."""
        cache = ValueCache(clock=clock)
        cache.get_or_compute("k", lambda: 1)

        clock.now = datetime(2025, 3, 15)

        assert cache.get_or_compute("k", lambda: 2) == 1


class TestClear:
    """Tests for explicit clear."""

    def test_clear_drops_entries(self, clock):
        """Test that clear empties the cache."""
        cache = ValueCache(clock=clock)
        cache.get_or_compute("k", lambda: 1)

        cache.clear()

        assert len(cache) == 0
        assert cache.get_or_compute("k", lambda: 2) == 2

    def test_clear_starts_new_generation(self, clock):
        """Test that every clear bumps the generation and deadline."""
        cache = ValueCache(clock=clock)
        cache.get_or_compute("k", lambda: 1)
        generation = cache.generation

        clock.advance(days=3)
        cache.clear()

        assert cache.generation == generation + 1
        assert cache.deadline == datetime(2025, 3, 18)
