"""
Live Event Streams (Server-Sent Events)

    GET /api/sse/cart    connected, then cart_update on every cart change
    GET /api/sse/orders  init with the kitchen queue, then order_update

Both streams are public: the customer display runs without a login.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.core.config import get_settings
from kiosk.database import get_db
from kiosk.dependencies import get_live_state
from kiosk.services.live_state import LiveState, StreamEvent
from kiosk.services.orders import list_active_orders, order_snapshot
from kiosk.services.streaming import EventStream

router = APIRouter(prefix="/api/sse", tags=["Streams"])


def _open_stream(request: Request, subscribe, initial: StreamEvent) -> StreamingResponse:
    settings = get_settings()
    return EventStream(
        subscribe=subscribe,
        initial=initial,
        heartbeat_interval=settings.heartbeat_interval_seconds,
        retry_ms=settings.stream_retry_ms,
        is_disconnected=request.is_disconnected,
    ).response()


@router.get("/cart")
async def cart_stream(
    request: Request,
    live_state: LiveState = Depends(get_live_state),
) -> StreamingResponse:
    return _open_stream(request, live_state.subscribe_cart, StreamEvent("connected"))


@router.get("/orders")
async def orders_stream(
    request: Request,
    live_state: LiveState = Depends(get_live_state),
    db: AsyncSession = Depends(get_db),
) -> StreamingResponse:
    active = [order_snapshot(order) for order in await list_active_orders(db)]
    return _open_stream(request, live_state.subscribe_orders, StreamEvent("init", active))
