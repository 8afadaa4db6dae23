"""Validation domain module for OrderStream.

Pure, stateless field-constraint checks for order aggregates.
"""

from .models import ViolationRule, Violation, ValidationResult
from .port import ValidatorPort
from .engine import OrderValidator

__all__ = [
    "ViolationRule",
    "Violation",
    "ValidationResult",
    "ValidatorPort",
    "OrderValidator",
]
