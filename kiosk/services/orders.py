"""
Order Service

Order submission, the pending -> cooking -> completed lifecycle, the
daily order-number sequence and the end-of-event wipe.

Store writes commit first; only then is the live state touched
(cart cleared, order broadcast) and the spreadsheet export queued.
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import case, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.core.exceptions import Conflict, NotFound, ValidationFailed
from kiosk.models import (
    ACTIVE_STATUSES,
    ALLOWED_TRANSITIONS,
    MenuItem,
    Order,
    OrderItem,
    OrderSequence,
    OrderStatus,
)
from kiosk.schemas import CartLineIn, OrderResponse
from kiosk.services.live_state import LiveState
from kiosk.tasks import clear_excel_file, export_order_to_excel

logger = logging.getLogger(__name__)

SEQUENCE_ID = 1


# =============================================================================
# HELPERS
# =============================================================================

def order_snapshot(order: Order) -> dict[str, Any]:
    """JSON-ready order snapshot used by the API, the streams and the export."""
    return OrderResponse.model_validate(order).model_dump(mode="json")


def queue_export(snapshot: dict[str, Any]) -> None:
    """Queue a spreadsheet upsert. A broker outage never fails the order."""
    try:
        export_order_to_excel.delay(snapshot)
    except Exception as e:
        logger.warning(f"Could not queue export for order #{snapshot.get('id')}: {e}")


# =============================================================================
# ORDER NUMBERS
# =============================================================================

async def ensure_order_sequence(db: AsyncSession) -> None:
    """Create the sequence row if this is a fresh database."""
    if await db.get(OrderSequence, SEQUENCE_ID) is None:
        db.add(OrderSequence(id=SEQUENCE_ID, current_number=0, last_reset_date=date.today()))
        await db.commit()


async def next_order_number(db: AsyncSession) -> int:
    """
    Take the next display number for today.

    Numbers restart at 1 on the first order of each day. The increment is
    a single UPDATE ... RETURNING, so concurrent submissions cannot share
    a number.
    """
    today = date.today()
    result = await db.execute(
        update(OrderSequence)
        .where(OrderSequence.id == SEQUENCE_ID)
        .values(
            current_number=case(
                (OrderSequence.last_reset_date == today, OrderSequence.current_number + 1),
                else_=1,
            ),
            last_reset_date=today,
        )
        .returning(OrderSequence.current_number)
        .execution_options(synchronize_session=False)
    )
    number = result.scalar()
    if number is None:
        db.add(OrderSequence(id=SEQUENCE_ID, current_number=1, last_reset_date=today))
        number = 1
    return number


# =============================================================================
# QUERIES
# =============================================================================

async def get_order(db: AsyncSession, order_id: int) -> Order:
    result = await db.execute(
        select(Order)
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFound(f"Order #{order_id} not found")
    return order


async def list_orders(db: AsyncSession, status: Optional[OrderStatus] = None) -> list[Order]:
    query = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
    if status is not None:
        query = query.where(Order.status == status)
    result = await db.execute(query)
    return list(result.scalars().all())


async def list_active_orders(db: AsyncSession) -> list[Order]:
    """Orders still in the kitchen (pending or cooking), oldest first."""
    result = await db.execute(
        select(Order)
        .where(Order.status.in_(ACTIVE_STATUSES))
        .order_by(Order.created_at.asc(), Order.id.asc())
    )
    return list(result.scalars().all())


# =============================================================================
# COMMANDS
# =============================================================================

async def create_order(db: AsyncSession, lines: list[CartLineIn]) -> Order:
    """
    Persist a new pending order from cart lines.

    Lines carry the name and price shown on the order screen; the total
    is always recomputed here. A line pointing at an unknown menu item
    rejects the whole order.
    """
    if not lines:
        raise ValidationFailed("Order has no items")

    menu_ids = {line.menu_item_id for line in lines}
    result = await db.execute(select(MenuItem.id).where(MenuItem.id.in_(menu_ids)))
    missing = sorted(menu_ids - set(result.scalars().all()))
    if missing:
        raise NotFound(f"Menu item(s) not found: {missing}")

    items = []
    for line in lines:
        unit_price = line.price + sum(option.price_modifier for option in line.options)
        options_json = None
        if line.options:
            options_json = json.dumps(
                [option.model_dump(by_alias=True) for option in line.options],
                ensure_ascii=False,
            )
        items.append(OrderItem(
            menu_item_id=line.menu_item_id,
            name=line.name,
            quantity=line.quantity,
            unit_price=unit_price,
            options_json=options_json,
        ))

    order = Order(
        order_number=await next_order_number(db),
        status=OrderStatus.PENDING,
        total_price=sum(item.unit_price * item.quantity for item in items),
        items=items,
    )
    db.add(order)
    await db.commit()

    logger.info(f"Order #{order.id} (No. {order.order_number}) created, total {order.total_price}")
    return await get_order(db, order.id)


async def submit_order(db: AsyncSession, live_state: LiveState, lines: list[CartLineIn]) -> Order:
    """Create the order, then clear the shared cart and announce it."""
    order = await create_order(db, lines)
    snapshot = order_snapshot(order)

    live_state.clear_cart()
    live_state.notify_new_order(snapshot)
    queue_export(snapshot)
    return order


async def update_order_status(db: AsyncSession, order_id: int, status: OrderStatus) -> Order:
    order = await get_order(db, order_id)

    if status not in ALLOWED_TRANSITIONS[order.status]:
        raise Conflict(
            f"Order #{order_id} cannot go from {order.status.value} to {status.value}"
        )

    order.status = status
    if status == OrderStatus.COMPLETED:
        order.completed_at = datetime.now()
    await db.commit()

    logger.info(f"Order #{order_id} -> {status.value}")
    return await get_order(db, order_id)


async def change_order_status(
    db: AsyncSession,
    live_state: LiveState,
    order_id: int,
    status: OrderStatus,
) -> Order:
    """Apply a lifecycle transition and broadcast the fresh snapshot."""
    order = await update_order_status(db, order_id, status)
    snapshot = order_snapshot(order)

    live_state.notify_order_update(snapshot)
    queue_export(snapshot)
    return order


async def clear_all_orders(db: AsyncSession) -> int:
    """
    Delete every order and restart today's numbering.

    Returns:
        Number of orders deleted
    """
    await db.execute(delete(OrderItem))
    result = await db.execute(delete(Order))
    deleted = result.rowcount or 0

    await db.execute(
        update(OrderSequence)
        .where(OrderSequence.id == SEQUENCE_ID)
        .values(current_number=0, last_reset_date=date.today())
    )
    await db.commit()
    db.expunge_all()

    try:
        clear_excel_file.delay()
    except Exception as e:
        logger.warning(f"Could not queue spreadsheet wipe: {e}")

    logger.warning(f"All orders cleared ({deleted} deleted)")
    return deleted
