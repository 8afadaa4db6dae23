"""Item rules"""

from collections import Counter

from ....schemas.order import Order
from ..models import Violation, ViolationRule
from .checks import (
    INT64_MAX,
    check_at_least,
    check_at_most,
    check_greater_than,
    check_length,
    check_text,
)


def validate_item_rules(order: Order) -> list[Violation]:
    """Validate every item of an order.

    Rules:
    - rid required, letters/digits only, 5..64 characters
    - track_number required, letters/digits only, at most 32 characters
    - name required ASCII, brand required
    - price > 0, total_price > 0, nm_id > 0
    - sale within [0, 100]
    - chrt_id >= 0, status >= 0
    - every integer fits a 64-bit column
    """
    issues: list[Violation] = []

    for index, item in enumerate(order.items):
        prefix = f"items[{index}]"

        check_text(issues, f"{prefix}.rid", item.rid, alphanumeric=True, min_length=5, max_length=64)
        check_text(issues, f"{prefix}.track_number", item.track_number, alphanumeric=True, max_length=32)
        check_text(issues, f"{prefix}.name", item.name, ascii_only=True, max_length=255)
        check_text(issues, f"{prefix}.brand", item.brand, max_length=255)
        check_length(issues, f"{prefix}.size", item.size, max_length=50)

        for field in ("price", "total_price", "nm_id"):
            value = getattr(item, field)
            if check_greater_than(issues, f"{prefix}.{field}", value, 0):
                check_at_most(issues, f"{prefix}.{field}", value, INT64_MAX)
        if check_at_least(issues, f"{prefix}.sale", item.sale, 0):
            check_at_most(issues, f"{prefix}.sale", item.sale, 100)
        for field in ("chrt_id", "status"):
            value = getattr(item, field)
            if check_at_least(issues, f"{prefix}.{field}", value, 0):
                check_at_most(issues, f"{prefix}.{field}", value, INT64_MAX)

    return issues


def validate_unique_rids(order: Order) -> list[Violation]:
    """Item rids must be unique within one order.

    Two items with the same rid would collapse into one stored row, so the
    stored aggregate could never equal the message again.
    """
    counts = Counter(item.rid for item in order.items if item.rid)
    return [
        Violation(
            field="items.rid",
            rule=ViolationRule.UNIQUE,
            message=f"rid '{rid}' appears {count} times",
            details={"rid": rid, "count": count},
        )
        for rid, count in counts.items()
        if count > 1
    ]
