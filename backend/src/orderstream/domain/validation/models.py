"""Validation result models"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ...errors import OrderValidationError


class ViolationRule(str, Enum):
    """Constraint kinds an order field can violate"""
    REQUIRED = "required"
    ALPHANUMERIC = "alphanumunicode"
    ASCII = "ascii"
    NUMERIC = "numeric"
    MIN_LENGTH = "min"
    MAX_LENGTH = "max"
    ONE_OF = "oneof"
    PHONE = "e164"
    EMAIL = "email"
    GREATER_THAN = "gt"
    GREATER_OR_EQUAL = "gte"
    LESS_OR_EQUAL = "lte"
    UNIQUE = "unique"
    RULE_ERROR = "rule_error"


@dataclass
class Violation:
    """A single field constraint violation.

    field is a dotted path into the aggregate, e.g. "payment.amount" or
    "items[2].sale".
    """
    field: str
    rule: ViolationRule
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"Field '{self.field}' is invalid: rule '{self.rule.value}' ({self.message})"


@dataclass
class ValidationResult:
    """Outcome of validating one order. Valid only when there are no violations."""
    order_uid: str
    violations: list[Violation] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def raise_if_invalid(self) -> None:
        """Raise OrderValidationError carrying the violations, if any"""
        if self.violations:
            raise OrderValidationError(self.order_uid, self.violations)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary (dead-letter reason)"""
        return {
            "order_uid": self.order_uid,
            "violations": [
                {"field": v.field, "rule": v.rule.value, "message": v.message}
                for v in self.violations
            ],
        }
