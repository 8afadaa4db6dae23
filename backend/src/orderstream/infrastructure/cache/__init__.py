"""Order cache implementations"""

from .port import CachePort
from .lru_cache import LRUCache

__all__ = [
    "CachePort",
    "LRUCache",
]
