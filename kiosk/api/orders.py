"""
Order Endpoints

Kiosk devices submit orders, kitchen devices move them through
pending -> cooking -> completed, the admin wipes them after the event.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.core.config import get_settings
from kiosk.core.exceptions import PermissionDenied
from kiosk.database import get_db
from kiosk.dependencies import (
    get_live_state,
    require_admin,
    require_cooking_access,
    require_order_access,
)
from kiosk.models import OrderStatus
from kiosk.schemas import (
    ClearOrdersRequest,
    ErrorResponse,
    OrderCreate,
    OrderCreateResponse,
    OrderResponse,
    OrderStatusUpdate,
    SuccessResponse,
)
from kiosk.services import orders as order_service
from kiosk.services.live_state import LiveState

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    status: Optional[OrderStatus] = Query(None),
    active: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """
    List orders.

    active=true returns the kitchen queue (pending and cooking, oldest
    first); otherwise all orders newest first, optionally by status.
    """
    if active:
        return await order_service.list_active_orders(db)
    return await order_service.list_orders(db, status)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_order(order_id: int, db: AsyncSession = Depends(get_db)):
    return await order_service.get_order(db, order_id)


@router.post(
    "",
    response_model=OrderCreateResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=[Depends(require_order_access)],
)
async def create_order(
    data: OrderCreate,
    db: AsyncSession = Depends(get_db),
    live_state: LiveState = Depends(get_live_state),
) -> OrderCreateResponse:
    order = await order_service.submit_order(db, live_state, data.items)
    return OrderCreateResponse(
        order_id=order.id,
        order_number=order.order_number,
        total_price=order.total_price,
    )


@router.patch(
    "/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    dependencies=[Depends(require_cooking_access)],
)
async def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    live_state: LiveState = Depends(get_live_state),
):
    return await order_service.change_order_status(db, live_state, order_id, data.status)


@router.post(
    "/clear",
    response_model=SuccessResponse,
    responses={403: {"model": ErrorResponse}},
    dependencies=[Depends(require_admin)],
)
async def clear_orders(
    data: ClearOrdersRequest,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    """Delete every order. Needs the master password on top of the admin session."""
    if data.password != get_settings().master_password:
        raise PermissionDenied("Wrong master password")

    deleted = await order_service.clear_all_orders(db)
    return SuccessResponse(message=f"{deleted} order(s) deleted")
