"""Integration tests for the cache-aside coordinator.

The cache must never serve a value older than a write the caller has
already observed, and cache failures must never fail a read or a write.
"""

import threading
from unittest.mock import patch

import pytest

from orderstream.errors import StoreError
from orderstream.infrastructure.cache import LRUCache
from orderstream.orders.cache_coordinator import CachedOrderRepository

from fakes import FailingCache, RecordingCache

pytestmark = pytest.mark.integration


class TestReadThrough:
    """get_with_cache"""

    def test_miss_then_hit(self, repository, make_order):
        cache = RecordingCache()
        coordinator = CachedOrderRepository(repository, cache)
        order = make_order()
        repository.upsert(order)

        with patch.object(repository, "fetch_by_uid", wraps=repository.fetch_by_uid) as fetch:
            assert coordinator.get_with_cache(order.order_uid) == order
            assert coordinator.get_with_cache(order.order_uid) == order
            assert fetch.call_count == 1

    def test_not_found_is_not_cached(self, cached_repository, cache):
        assert cached_repository.get_with_cache("missing") is None
        assert "missing" not in cache

    def test_store_failure_on_miss_propagates(self, cached_repository, repository):
        with patch.object(repository, "fetch_by_uid", side_effect=StoreError("down")):
            with pytest.raises(StoreError):
                cached_repository.get_with_cache("uid")


class TestWritePath:
    """upsert: invalidate, reload, set"""

    def test_write_populates_cache_with_stored_value(self, repository, make_order):
        cache = RecordingCache()
        coordinator = CachedOrderRepository(repository, cache)
        order = make_order()

        coordinator.upsert(order)

        assert cache.calls == [("delete", order.order_uid), ("set", order.order_uid)]
        assert cache.get(order.order_uid) == order

    def test_read_after_write_sees_new_value(self, cached_repository, make_order):
        order = make_order()
        cached_repository.upsert(order)
        assert cached_repository.get_with_cache(order.order_uid).items[0].price == 453

        updated = order.model_copy(deep=True)
        updated.items[0].price = 900
        cached_repository.upsert(updated)

        assert cached_repository.get_with_cache(order.order_uid).items[0].price == 900

    def test_noop_upsert_leaves_cache_alone(self, repository, make_order):
        cache = RecordingCache()
        coordinator = CachedOrderRepository(repository, cache)
        order = make_order()
        coordinator.upsert(order)
        cache.calls.clear()

        result = coordinator.upsert(order)

        assert result.changed is False
        assert cache.calls == []

    def test_failed_write_leaves_cache_alone(self, repository, make_order):
        cache = RecordingCache()
        coordinator = CachedOrderRepository(repository, cache)
        order = make_order()
        coordinator.upsert(order)
        cache.calls.clear()

        updated = order.model_copy(deep=True)
        updated.payment.amount = 1
        with patch.object(repository, "upsert", side_effect=StoreError("down")):
            with pytest.raises(StoreError):
                coordinator.upsert(updated)

        assert cache.calls == []
        assert coordinator.get_with_cache(order.order_uid) == order

    def test_failed_reload_leaves_entry_invalidated(self, repository, make_order):
        cache = LRUCache(10)
        coordinator = CachedOrderRepository(repository, cache)
        order = make_order()
        coordinator.upsert(order)

        updated = order.model_copy(deep=True)
        updated.payment.amount = 1
        with patch.object(repository, "fetch_by_uid", wraps=repository.fetch_by_uid) as fetch:
            # upsert's own reads succeed; the coordinator's reload fails
            fetch.side_effect = [order, updated, StoreError("down")]
            result = coordinator.upsert(updated)

        assert result.changed is True
        assert order.order_uid not in cache
        assert coordinator.get_with_cache(order.order_uid).payment.amount == 1

    def test_reload_sees_commit_from_another_process(self, repository, make_order):
        """A commit landing after upsert's own re-read is what gets cached"""
        cache = LRUCache(10)
        coordinator = CachedOrderRepository(repository, cache)
        order = make_order()
        coordinator.upsert(order)

        ours = order.model_copy(deep=True)
        ours.payment.amount = 1
        theirs = order.model_copy(deep=True)
        theirs.payment.amount = 2
        real_upsert = repository.upsert

        def upsert_then_foreign_commit(value):
            result = real_upsert(value)
            # Another instance writes straight to the store, bypassing this cache
            real_upsert(theirs)
            return result

        with patch.object(repository, "upsert", side_effect=upsert_then_foreign_commit):
            result = coordinator.upsert(ours)

        assert result.order.payment.amount == 1
        assert cache.get(order.order_uid).payment.amount == 2


class TestCoherence:
    """Concurrent readers and writers"""

    def test_stale_read_cannot_overwrite_newer_write(self, repository, make_order):
        """A miss that read the old row before a write must not cache it afterwards"""
        cache = LRUCache(10)
        coordinator = CachedOrderRepository(repository, cache)
        old = make_order()
        repository.upsert(old)
        new = old.model_copy(deep=True)
        new.items[0].price = 1000

        reader_fetched = threading.Event()
        writer_done = threading.Event()
        real_fetch = repository.fetch_by_uid
        results = {}

        def slow_fetch(uid):
            value = real_fetch(uid)
            if threading.current_thread().name == "reader":
                reader_fetched.set()
                writer_done.wait(5)
            return value

        def reader():
            results["read"] = coordinator.get_with_cache(old.order_uid)

        with patch.object(repository, "fetch_by_uid", side_effect=slow_fetch):
            t = threading.Thread(target=reader, name="reader")
            t.start()
            assert reader_fetched.wait(5)
            coordinator.upsert(new)
            writer_done.set()
            t.join(5)

        assert results["read"].items[0].price == 453
        assert cache.get(old.order_uid).items[0].price == 1000
        assert coordinator.get_with_cache(old.order_uid).items[0].price == 1000

    def test_forgotten_generations_skip_fill(self, repository, make_order):
        """Once tracking overflows, fills for untracked UIDs started earlier are dropped"""
        cache = LRUCache(10)
        coordinator = CachedOrderRepository(repository, cache, max_tracked_generations=1)
        first = make_order("uidfirst1")
        repository.upsert(first)

        generation = coordinator._generation("uidfirst1")
        coordinator.upsert(make_order("uidsecond"))
        coordinator.upsert(make_order("uidthird3"))

        coordinator._fill_if_current("uidfirst1", first, generation)
        assert "uidfirst1" not in cache


class TestEviction:
    """Capacity bound"""

    def test_capacity_plus_one_orders(self, repository, make_order):
        cache = LRUCache(3)
        coordinator = CachedOrderRepository(repository, cache)
        uids = [f"uidnumber{i}" for i in range(4)]
        for uid in uids:
            coordinator.upsert(make_order(uid))

        assert len(cache) == 3
        assert uids[0] not in cache
        # Evicted entries are still served from the store
        assert coordinator.get_with_cache(uids[0]).order_uid == uids[0]


class TestCacheFailures:
    """CacheError never escapes"""

    def test_read_falls_through_to_store(self, repository, make_order):
        coordinator = CachedOrderRepository(repository, FailingCache())
        order = make_order()
        repository.upsert(order)
        assert coordinator.get_with_cache(order.order_uid) == order

    def test_write_succeeds(self, repository, make_order):
        coordinator = CachedOrderRepository(repository, FailingCache())
        order = make_order()
        result = coordinator.upsert(order)
        assert result.changed is True
        assert repository.fetch_by_uid(order.order_uid) == order
