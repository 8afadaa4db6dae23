"""Delivery rules"""

from ....schemas.order import Order
from ..models import Violation
from .checks import check_email, check_length, check_phone, check_required, check_text


def validate_delivery_rules(order: Order) -> list[Violation]:
    """Validate the delivery block of an order."""
    issues: list[Violation] = []
    delivery = order.delivery

    check_text(issues, "delivery.name", delivery.name, min_length=2, max_length=255)

    if check_required(issues, "delivery.phone", delivery.phone):
        check_phone(issues, "delivery.phone", delivery.phone)

    check_text(issues, "delivery.zip", delivery.zip, min_length=4, max_length=12)
    check_text(issues, "delivery.city", delivery.city, ascii_only=True, max_length=255)
    check_text(issues, "delivery.address", delivery.address, max_length=255)
    check_text(issues, "delivery.region", delivery.region, max_length=255)

    if check_required(issues, "delivery.email", delivery.email):
        if check_length(issues, "delivery.email", delivery.email, max_length=255):
            check_email(issues, "delivery.email", delivery.email)

    return issues
