"""Unit tests for the bounded LRU order cache"""

import threading

import pytest

from orderstream.infrastructure.cache import LRUCache


class TestLRUCache:
    """Strict least-recently-used eviction"""

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            LRUCache(0)

    def test_get_missing_returns_none(self):
        assert LRUCache(2).get("nope") is None

    def test_set_then_get(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        assert cache.get("a") == 1

    def test_evicts_least_recently_used(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.get("a") is None
        assert cache.keys() == ["b", "c"]

    def test_get_refreshes_recency(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)
        assert "a" in cache
        assert "b" not in cache

    def test_overwrite_does_not_evict(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("a", 10)
        assert len(cache) == 2
        assert cache.get("a") == 10
        assert cache.keys() == ["b", "a"]

    def test_capacity_plus_one_distinct_keys(self):
        """Inserting capacity + 1 keys without reads evicts exactly the first"""
        capacity = 5
        cache = LRUCache(capacity)
        for i in range(capacity + 1):
            cache.set(f"k{i}", i)
        assert len(cache) == capacity
        assert "k0" not in cache
        assert all(f"k{i}" in cache for i in range(1, capacity + 1))

    def test_contains_does_not_touch_recency(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.set("b", 2)
        assert "a" in cache
        cache.set("c", 3)
        assert "a" not in cache

    def test_delete(self):
        cache = LRUCache(2)
        cache.set("a", 1)
        cache.delete("a")
        cache.delete("missing")
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_on_evict_called_with_key_and_value(self):
        evicted = []
        cache = LRUCache(1, on_evict=lambda key, value: evicted.append((key, value)))
        cache.set("a", 1)
        cache.set("b", 2)
        assert evicted == [("a", 1)]

    def test_concurrent_sets_respect_capacity(self):
        cache = LRUCache(50)

        def writer(offset):
            for i in range(200):
                cache.set(f"{offset}-{i}", i)
                cache.get(f"{offset}-{i // 2}")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 50
        assert len(set(cache.keys())) == 50
