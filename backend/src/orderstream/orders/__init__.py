"""Order lookup: cache coordination, query service and HTTP router"""

from .cache_coordinator import CachedOrderRepository
from .service import OrderQueryService

__all__ = [
    "CachedOrderRepository",
    "OrderQueryService",
]
