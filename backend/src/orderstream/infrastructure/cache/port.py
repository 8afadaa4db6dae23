"""CachePort interface"""

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

V = TypeVar("V")


class CachePort(ABC, Generic[V]):
    """Capability interface of a string-keyed cache.

    Implementations may raise CacheError; callers treat the cache as
    non-authoritative and must survive such failures.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[V]:
        """Return the cached value or None on a miss."""
        pass

    @abstractmethod
    def set(self, key: str, value: V) -> None:
        """Insert or replace a value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """Return keys from least to most recently used."""
        pass
