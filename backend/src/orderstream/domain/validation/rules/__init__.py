"""Validation rules implementations.

Each rule module contains discrete validation functions that return
Violation objects when constraints are broken.
"""

from .order_rules import validate_order_rules
from .delivery_rules import validate_delivery_rules
from .payment_rules import validate_payment_rules
from .item_rules import validate_item_rules, validate_unique_rids

__all__ = [
    "validate_order_rules",
    "validate_delivery_rules",
    "validate_payment_rules",
    "validate_item_rules",
    "validate_unique_rids",
]
