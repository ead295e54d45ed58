"""
EmberGuard - Utility Tests
==========================

Tests for the LRU cache, retry helper and safe background tasks.
"""

import asyncio

import pytest

from emberguard.utils import LRUCache, create_safe_task, retry_async


# =============================================================================
# LRU Cache Tests
# =============================================================================

class TestLRUCache:
    """Tests for LRUCache capacity and recency."""

    def test_rejects_zero_capacity(self):
        """Test max_size below 1 is rejected."""
        with pytest.raises(ValueError):
            LRUCache(0)

    def test_evicts_least_recently_used(self):
        """Test inserting past capacity evicts the oldest entry."""
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        evicted = cache.set("c", 3)

        assert evicted == [("a", 1)]
        assert "a" not in cache
        assert len(cache) == 2

    def test_get_refreshes_recency(self):
        """Test get() protects an entry from the next eviction."""
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert "a" in cache
        assert "b" not in cache

    def test_get_without_touch_keeps_order(self):
        """Test get(touch=False) leaves the entry oldest."""
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a", touch=False)
        cache.set("c", 3)

        assert "a" not in cache

    def test_get_or_create(self):
        """Test factory runs only for missing keys."""
        cache = LRUCache(4)
        calls = []

        def factory():
            calls.append(1)
            return []

        first = cache.get_or_create("k", factory)
        second = cache.get_or_create("k", factory)

        assert first is second
        assert len(calls) == 1

    def test_prune_and_delete(self):
        """Test prune() removes matching entries and delete() reports presence."""
        cache = LRUCache(10)
        for i in range(6):
            cache.set(i, i)

        assert cache.prune(lambda _, v: v % 2 == 0) == 3
        assert sorted(cache) == [1, 3, 5]
        assert cache.delete(1) is True
        assert cache.delete(1) is False


# =============================================================================
# Retry Tests
# =============================================================================

class TestRetryAsync:
    """Tests for retry_async backoff behavior."""

    @pytest.mark.asyncio
    async def test_succeeds_after_transient_failures(self):
        """Test an OSError is retried until the call succeeds."""
        attempts = {"count": 0}

        async def flaky():
            attempts["count"] += 1
            if attempts["count"] < 3:
                raise OSError("disk busy")
            return "ok"

        result = await retry_async(flaky, max_retries=3, base_delay=0)

        assert result == "ok"
        assert attempts["count"] == 3

    @pytest.mark.asyncio
    async def test_reraises_when_exhausted(self):
        """Test the last exception propagates after max_retries."""
        attempts = {"count": 0}

        async def always_fails():
            attempts["count"] += 1
            raise OSError("gone")

        with pytest.raises(OSError):
            await retry_async(always_fails, max_retries=2, base_delay=0)

        assert attempts["count"] == 3

    @pytest.mark.asyncio
    async def test_non_retryable_raises_immediately(self):
        """Test exceptions outside the retry set are not retried."""
        attempts = {"count": 0}

        async def bad_value():
            attempts["count"] += 1
            raise ValueError("bad")

        with pytest.raises(ValueError):
            await retry_async(bad_value, max_retries=3, base_delay=0)

        assert attempts["count"] == 1


# =============================================================================
# Safe Task Tests
# =============================================================================

class TestCreateSafeTask:
    """Tests for create_safe_task error containment."""

    @pytest.mark.asyncio
    async def test_exception_is_contained(self):
        """Test a failing background task completes without raising."""
        async def boom():
            raise RuntimeError("background failure")

        task = create_safe_task(boom(), "Test Task")
        await task

        assert task.done()
        assert task.exception() is None

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self):
        """Test cancelling the task still cancels it."""
        task = create_safe_task(asyncio.sleep(10), "Sleeper")
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
