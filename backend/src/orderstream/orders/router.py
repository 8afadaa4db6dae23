"""Orders API Router - lookup by order UID."""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..dependencies import get_order_service
from ..errors import StoreError
from ..schemas.order import Order
from .service import OrderQueryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get(
    "/{order_uid}",
    response_model=Order,
    summary="Get order by UID",
    responses={
        404: {"description": "Order not found"},
        500: {"description": "Order store unavailable"},
    },
)
def get_order_by_uid(
    order_uid: str,
    service: OrderQueryService = Depends(get_order_service),
):
    """Return the order aggregate with delivery, payment and items.

    Responses:
        200: Order JSON in the same shape the feed delivers
        404: {"error": "order not found"}
        500: {"error": "failed to get order"}
    """
    try:
        order = service.get_order(order_uid)
    except StoreError as e:
        logger.error(f"Failed to get order {order_uid}: {e}", extra={"order_uid": order_uid})
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "failed to get order"},
        )

    if order is None:
        logger.info(f"Order {order_uid} not found", extra={"order_uid": order_uid})
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": "order not found"},
        )

    return order
