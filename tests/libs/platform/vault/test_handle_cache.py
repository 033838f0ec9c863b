"""
Tests for KeyedHandleCache.

Tests cover:
- One handle per namespace, distinct handles per namespace
- Exactly one construction under concurrent first use
- Construction of one namespace does not block another
- Failed construction caches nothing
"""

import threading
import time

import pytest

from libs.platform.vault.handle_cache import KeyedHandleCache


class CountingFactory:
    """Factory that records calls and optionally waits before returning."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def __call__(self, namespace: str) -> object:
        with self._lock:
            self.calls.append(namespace)
        if self.delay:
            time.sleep(self.delay)
        return object()


class TestKeyedHandleCache:
    """Tests for basic cache behavior."""

    def test_same_namespace_returns_same_handle(self):
        factory = CountingFactory()
        cache = KeyedHandleCache(factory)

        first = cache.get_or_create("kv/nifi")
        second = cache.get_or_create("kv/nifi")

        assert first is second
        assert factory.calls == ["kv/nifi"]

    def test_distinct_namespaces_get_distinct_handles(self):
        factory = CountingFactory()
        cache = KeyedHandleCache(factory)

        assert cache.get_or_create("kv/a") is not cache.get_or_create("kv/b")
        assert cache.namespaces() == ["kv/a", "kv/b"]
        assert len(cache) == 2
        assert "kv/a" in cache
        assert "kv/c" not in cache

    def test_none_handle_constructed_once(self):
        """Test a factory returning None is cached like any other handle."""
        calls = []

        def factory(namespace: str) -> None:
            calls.append(namespace)

        cache = KeyedHandleCache(factory)

        assert cache.get_or_create("kv/nifi") is None
        assert cache.get_or_create("kv/nifi") is None
        assert calls == ["kv/nifi"]
        assert "kv/nifi" in cache

    def test_failed_construction_not_cached(self):
        """Test the next caller retries after the factory raises."""
        attempts = []

        def flaky_factory(namespace: str) -> str:
            attempts.append(namespace)
            if len(attempts) == 1:
                raise RuntimeError("backend unavailable")
            return f"handle:{namespace}"

        cache = KeyedHandleCache(flaky_factory)

        with pytest.raises(RuntimeError):
            cache.get_or_create("kv/nifi")
        assert "kv/nifi" not in cache

        assert cache.get_or_create("kv/nifi") == "handle:kv/nifi"
        assert attempts == ["kv/nifi", "kv/nifi"]


class TestConcurrentConstruction:
    """Tests for thread safety of first use."""

    def test_concurrent_first_use_constructs_once(self):
        """Test K simultaneous callers trigger exactly one construction."""
        workers = 32
        factory = CountingFactory(delay=0.05)
        cache = KeyedHandleCache(factory)
        barrier = threading.Barrier(workers)
        results: list[object] = []
        results_lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            handle = cache.get_or_create("kv/nifi")
            with results_lock:
                results.append(handle)

        threads = [threading.Thread(target=worker) for _ in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert factory.calls == ["kv/nifi"]
        assert len(results) == workers
        assert all(handle is results[0] for handle in results)

    def test_slow_construction_does_not_block_other_namespace(self):
        """Test a namespace under construction does not hold up another namespace."""
        release = threading.Event()
        started = threading.Event()

        def factory(namespace: str) -> str:
            if namespace == "kv/slow":
                started.set()
                release.wait(timeout=5)
            return f"handle:{namespace}"

        cache = KeyedHandleCache(factory)
        slow_thread = threading.Thread(target=cache.get_or_create, args=("kv/slow",))
        slow_thread.start()
        assert started.wait(timeout=5)

        try:
            assert cache.get_or_create("kv/fast") == "handle:kv/fast"
            assert "kv/slow" not in cache
        finally:
            release.set()
            slow_thread.join()

        assert cache.get_or_create("kv/slow") == "handle:kv/slow"
