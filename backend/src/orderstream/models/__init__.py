"""SQLAlchemy Models for OrderStream"""

from .base import Base
from .order import OrderRow, DeliveryRow, PaymentRow, ItemRow

__all__ = [
    "Base",
    "OrderRow",
    "DeliveryRow",
    "PaymentRow",
    "ItemRow",
]
