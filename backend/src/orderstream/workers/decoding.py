"""Decoding of raw feed payloads into order candidates."""

from typing import List

from pydantic import TypeAdapter, ValidationError

from ..errors import DecodeError
from ..schemas.order import Order

_ORDER_LIST = TypeAdapter(List[Order])


def decode_orders(payload: bytes) -> List[Order]:
    """Decode a payload holding either a JSON array of orders or one order.

    The array form is tried first. If it fails, or yields no orders, the
    payload is decoded as a single order object and wrapped in a list.

    Args:
        payload: Raw UTF-8 JSON bytes

    Returns:
        Non-empty list of decoded (not yet validated) orders

    Raises:
        DecodeError: If the payload matches neither shape
    """
    try:
        orders = _ORDER_LIST.validate_json(payload)
    except ValidationError:
        orders = []

    if orders:
        return orders

    try:
        return [Order.model_validate_json(payload)]
    except ValidationError as e:
        raise DecodeError(f"payload is neither an order array nor an order object: {e.error_count()} errors") from e
