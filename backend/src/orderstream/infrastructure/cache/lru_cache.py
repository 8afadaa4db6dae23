"""Bounded least-recently-used cache.

An OrderedDict gives the hash map plus doubly linked recency list: the front
is the least recently used key, the back the most recent. Every operation
runs under one lock because a read also reorders the list.
"""

import logging
import threading
from collections import OrderedDict
from typing import Callable, List, Optional, TypeVar

from .port import CachePort

logger = logging.getLogger(__name__)

V = TypeVar("V")


class LRUCache(CachePort[V]):
    """Thread-safe LRU cache with a fixed capacity.

    Inserting a new key into a full cache evicts exactly the least recently
    used key (reads and writes both count as use).

    Args:
        capacity: Maximum number of entries (must be > 0)
        on_evict: Optional callback invoked with (key, value) for each
            capacity eviction, outside the lock
    """

    def __init__(self, capacity: int, on_evict: Optional[Callable[[str, V], None]] = None):
        if capacity <= 0:
            raise ValueError(f"cache capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._on_evict = on_evict
        self._entries: "OrderedDict[str, V]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            if key not in self._entries:
                return None
            self._entries.move_to_end(key)
            return self._entries[key]

    def set(self, key: str, value: V) -> None:
        evicted = None
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            elif len(self._entries) >= self.capacity:
                evicted = self._entries.popitem(last=False)
            self._entries[key] = value

        if evicted is not None:
            logger.debug(f"cache evicted {evicted[0]}")
            if self._on_evict is not None:
                self._on_evict(*evicted)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        """Membership test that does not count as use."""
        with self._lock:
            return key in self._entries
