"""Order header rules"""

from ....schemas.order import Order
from ..models import Violation
from .checks import (
    INT64_MAX,
    check_at_most,
    check_greater_than,
    check_length,
    check_one_of,
    check_required,
    check_text,
)

SUPPORTED_LOCALES = ("ru", "en")


def validate_order_rules(order: Order) -> list[Violation]:
    """Validate the scalar header fields of an order.

    Rules:
    - order_uid, track_number, entry, customer_id required
    - track_number, entry, customer_id letters/digits only
    - customer_id 1..64 characters
    - locale one of ru, en
    - delivery_service ASCII, at most 50 characters
    - shardkey, oof_shard digits only
    - sm_id > 0 and within a 64-bit column
    - date_created required
    """
    issues: list[Violation] = []

    check_text(issues, "order_uid", order.order_uid, max_length=255)
    check_text(issues, "track_number", order.track_number, alphanumeric=True, max_length=255)
    check_text(issues, "entry", order.entry, alphanumeric=True, max_length=50)

    if check_required(issues, "locale", order.locale):
        check_one_of(issues, "locale", order.locale, SUPPORTED_LOCALES)

    check_length(issues, "internal_signature", order.internal_signature, max_length=255)
    check_text(
        issues, "customer_id", order.customer_id,
        alphanumeric=True, min_length=1, max_length=64,
    )
    check_text(issues, "delivery_service", order.delivery_service, ascii_only=True, max_length=50)
    check_text(issues, "shardkey", order.shardkey, numeric=True, max_length=50)
    if check_greater_than(issues, "sm_id", order.sm_id, 0):
        check_at_most(issues, "sm_id", order.sm_id, INT64_MAX)
    check_required(issues, "date_created", order.date_created)
    check_text(issues, "oof_shard", order.oof_shard, numeric=True, max_length=50)

    return issues
