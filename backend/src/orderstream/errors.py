"""Exception hierarchy for the ingestion and lookup paths.

NotFound is never an exception: lookups return None for a missing order.
"""

from typing import Optional


class OrderStreamError(Exception):
    """Base class for all OrderStream errors."""


class DecodeError(OrderStreamError):
    """Payload is neither a JSON array of orders nor a single order object."""


class OrderValidationError(OrderStreamError):
    """An order violates one or more field constraints.

    Attributes:
        order_uid: UID of the rejected order (may be empty)
        violations: List of Violation objects from the validator
    """

    def __init__(self, order_uid: Optional[str], violations: list):
        self.order_uid = order_uid
        self.violations = violations
        summary = "; ".join(str(v) for v in violations)
        super().__init__(f"order {order_uid or '<unknown>'} is invalid: {summary}")


class StoreError(OrderStreamError):
    """Transactional or connectivity failure in the order store."""


class CacheError(OrderStreamError):
    """Cache backend failure. Logged by callers, never propagated."""
