"""Payment rules"""

from ....schemas.order import Order
from ..models import Violation
from .checks import (
    INT64_MAX,
    check_at_least,
    check_at_most,
    check_greater_than,
    check_length,
    check_text,
)


def validate_payment_rules(order: Order) -> list[Violation]:
    """Validate the payment block of an order.

    Monetary rules: amount > 0, payment_dt > 0, and delivery_cost,
    goods_total, custom_fee >= 0. Every integer must fit a 64-bit column.
    """
    issues: list[Violation] = []
    payment = order.payment

    check_text(issues, "payment.transaction", payment.transaction, max_length=255)
    check_length(issues, "payment.request_id", payment.request_id, max_length=255)
    check_text(issues, "payment.currency", payment.currency, max_length=10)
    check_text(issues, "payment.provider", payment.provider, ascii_only=True, max_length=50)
    check_text(issues, "payment.bank", payment.bank, max_length=50)

    for field in ("amount", "payment_dt"):
        value = getattr(payment, field)
        if check_greater_than(issues, f"payment.{field}", value, 0):
            check_at_most(issues, f"payment.{field}", value, INT64_MAX)

    for field in ("delivery_cost", "goods_total", "custom_fee"):
        value = getattr(payment, field)
        if check_at_least(issues, f"payment.{field}", value, 0):
            check_at_most(issues, f"payment.{field}", value, INT64_MAX)

    return issues
