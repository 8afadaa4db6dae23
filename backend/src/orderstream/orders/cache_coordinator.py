"""Cache-aside coordination between the order repository and the LRU cache.

Writes follow invalidate -> reload -> set. Every invalidation stamps the UID
with a fresh generation number; a value read from the store is only put into
the cache if the UID's generation is unchanged since the read started. A
reader that fetched a pre-update row therefore cannot overwrite the entry a
concurrent writer just installed.

Generations are tracked for a bounded number of recently written UIDs. An
untracked UID reports the highest generation ever dropped from tracking, so
forgetting a UID can only make a pending fill be skipped, never accepted
wrongly.

The cache is never authoritative. Cache failures are logged and the store
result is returned regardless.
"""

import logging
import threading
from collections import OrderedDict
from typing import Optional

from ..errors import CacheError, StoreError
from ..infrastructure.cache import CachePort
from ..infrastructure.repositories import OrderRepository, UpsertResult
from ..observability.metrics import cache_requests_total
from ..schemas.order import Order

logger = logging.getLogger(__name__)


class CachedOrderRepository:
    """Order repository fronted by a cache.

    Args:
        repository: Authoritative order store
        cache: Bounded cache keyed by order UID
        max_tracked_generations: How many recently written UIDs keep their
            own generation number
    """

    def __init__(
        self,
        repository: OrderRepository,
        cache: CachePort[Order],
        max_tracked_generations: int = 10_000,
    ):
        self.repository = repository
        self.cache = cache
        self.max_tracked_generations = max_tracked_generations
        self._generations: "OrderedDict[str, int]" = OrderedDict()
        self._generation_floor = 0
        self._next_generation = 0
        # Guards generation bookkeeping and the conditional cache fill.
        # Never held across a store call.
        self._lock = threading.Lock()

    def get_with_cache(self, order_uid: str) -> Optional[Order]:
        """Look an order up, serving from the cache when possible.

        Args:
            order_uid: Order UID

        Returns:
            Order, or None if it does not exist

        Raises:
            StoreError: On a cache miss the store could not serve
        """
        cached = self._cache_get(order_uid)
        if cached is not None:
            cache_requests_total.labels(result="hit").inc()
            logger.debug(f"cache hit {order_uid}", extra={"order_uid": order_uid})
            return cached

        cache_requests_total.labels(result="miss").inc()
        logger.debug(f"cache miss {order_uid}", extra={"order_uid": order_uid})

        generation = self._generation(order_uid)
        order = self.repository.fetch_by_uid(order_uid)
        if order is not None:
            self._fill_if_current(order_uid, order, generation)
        return order

    def upsert(self, order: Order) -> UpsertResult:
        """Write an order through the repository and refresh the cache.

        A no-op upsert (identical aggregate already stored) leaves the cache
        alone. A real change invalidates the entry, reloads the committed
        aggregate from the store and caches it.

        The value returned by the repository is not cached directly: it was
        read before the invalidation, and a writer outside this process (which
        never touches these generations) may have committed since. Reading
        after the invalidation guarantees the cached value is at least as new
        as every commit that preceded it.

        Args:
            order: Validated order aggregate

        Returns:
            UpsertResult from the repository

        Raises:
            StoreError: If the write fails (the cache is left untouched)
        """
        result = self.repository.upsert(order)
        if not result.changed:
            return result

        order_uid = order.order_uid
        generation = self._invalidate(order_uid)

        try:
            fresh = self.repository.fetch_by_uid(order_uid)
        except StoreError as e:
            # Entry stays invalidated; the next read repopulates it
            logger.warning(
                f"Reload after write failed for {order_uid}: {e}",
                extra={"order_uid": order_uid}
            )
            return result

        if fresh is not None:
            self._fill_if_current(order_uid, fresh, generation)
        return result

    def _generation(self, order_uid: str) -> int:
        with self._lock:
            return self._generations.get(order_uid, self._generation_floor)

    def _invalidate(self, order_uid: str) -> int:
        with self._lock:
            self._next_generation += 1
            generation = self._next_generation
            self._generations[order_uid] = generation
            self._generations.move_to_end(order_uid)
            while len(self._generations) > self.max_tracked_generations:
                _, dropped = self._generations.popitem(last=False)
                self._generation_floor = max(self._generation_floor, dropped)

            try:
                self.cache.delete(order_uid)
            except CacheError as e:
                logger.error(
                    f"Cache delete failed for {order_uid}: {e}",
                    extra={"order_uid": order_uid}
                )
            logger.debug(f"cache invalidated {order_uid}", extra={"order_uid": order_uid})
            return generation

    def _fill_if_current(self, order_uid: str, order: Order, generation: int) -> None:
        with self._lock:
            current = self._generations.get(order_uid, self._generation_floor)
            if current != generation:
                logger.debug(
                    f"Skipping cache fill for {order_uid}: newer write in flight",
                    extra={"order_uid": order_uid}
                )
                return
            try:
                self.cache.set(order_uid, order)
            except CacheError as e:
                logger.error(
                    f"Cache set failed for {order_uid}: {e}",
                    extra={"order_uid": order_uid}
                )

    def _cache_get(self, order_uid: str) -> Optional[Order]:
        try:
            return self.cache.get(order_uid)
        except CacheError as e:
            logger.error(f"Cache get failed for {order_uid}: {e}", extra={"order_uid": order_uid})
            return None
