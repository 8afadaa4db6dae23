"""OrderValidator - orchestrates validation rules"""

import logging

from ...schemas.order import Order
from .models import ValidationResult, Violation, ViolationRule
from .port import ValidatorPort
from .rules import (
    validate_order_rules,
    validate_delivery_rules,
    validate_payment_rules,
    validate_item_rules,
    validate_unique_rids,
)

logger = logging.getLogger(__name__)


class OrderValidator(ValidatorPort):
    """Concrete implementation of ValidatorPort.

    Runs every rule function and collects all violations. Validation is
    fail-closed: if a rule raises, the order is rejected with a RULE_ERROR
    violation rather than being let through.
    """

    rule_functions = [
        ("order_rules", validate_order_rules),
        ("delivery_rules", validate_delivery_rules),
        ("payment_rules", validate_payment_rules),
        ("item_rules", validate_item_rules),
        ("unique_rids", validate_unique_rids),
    ]

    def validate(self, order: Order) -> ValidationResult:
        """Run all validation rules on an order.

        Args:
            order: Decoded order aggregate

        Returns:
            ValidationResult with every violation found
        """
        result = ValidationResult(order_uid=order.order_uid)

        for rule_name, rule_func in self.rule_functions:
            try:
                result.violations.extend(rule_func(order))
            except Exception as e:
                logger.error(
                    f"Validation rule '{rule_name}' failed for order {order.order_uid}: {e}",
                    exc_info=True
                )
                result.violations.append(Violation(
                    field="*",
                    rule=ViolationRule.RULE_ERROR,
                    message=f"validation rule '{rule_name}' failed to execute",
                    details={"rule_name": rule_name, "error": str(e)},
                ))

        if result.violations:
            logger.debug(
                f"Order {order.order_uid} failed validation with "
                f"{len(result.violations)} violations"
            )

        return result
