"""Order lookup service consumed by the HTTP boundary"""

from typing import Optional

from ..schemas.order import Order
from .cache_coordinator import CachedOrderRepository


class OrderQueryService:
    """Read-only access to orders, served through the cache.

    get_order returns the order, None when it does not exist, and raises
    StoreError when the store cannot answer.
    """

    def __init__(self, repository: CachedOrderRepository):
        self.repository = repository

    def get_order(self, order_uid: str) -> Optional[Order]:
        return self.repository.get_with_cache(order_uid)
