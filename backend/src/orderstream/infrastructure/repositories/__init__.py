"""Database repositories"""

from .order_repository import OrderRepository, UpsertResult

__all__ = [
    "OrderRepository",
    "UpsertResult",
]
