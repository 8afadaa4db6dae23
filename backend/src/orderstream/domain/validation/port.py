"""ValidatorPort interface"""

from abc import ABC, abstractmethod

from ...schemas.order import Order
from .models import ValidationResult


class ValidatorPort(ABC):
    """Port interface for order validators.

    Implementations must be side-effect free: the ingestion worker calls
    validate once per candidate order before admitting it to a batch.
    """

    @abstractmethod
    def validate(self, order: Order) -> ValidationResult:
        """Validate an order aggregate.

        Args:
            order: Decoded order

        Returns:
            ValidationResult listing every violation found (empty when valid)
        """
        pass
