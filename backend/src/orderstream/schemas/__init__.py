"""Wire schemas for OrderStream"""

from .order import Order, Delivery, Payment, Item

__all__ = [
    "Order",
    "Delivery",
    "Payment",
    "Item",
]
