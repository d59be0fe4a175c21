"""
Sales Statistics

Today's figures for the admin dashboard. "Today" is the server's local
calendar day; cancelled orders never count.
"""

from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.models import Order, OrderItem, OrderStatus
from kiosk.schemas import MenuRankingEntry, StatsResponse, TodayStats


def today_range() -> tuple[datetime, datetime]:
    start = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def _today_filter():
    start, end = today_range()
    return (
        Order.created_at >= start,
        Order.created_at < end,
        Order.status != OrderStatus.CANCELLED,
    )


async def get_today_stats(db: AsyncSession) -> TodayStats:
    totals = await db.execute(
        select(func.count(Order.id), func.coalesce(func.sum(Order.total_price), 0))
        .where(*_today_filter())
    )
    total_orders, total_revenue = totals.one()

    completed = await db.execute(
        select(func.count(Order.id))
        .where(*_today_filter())
        .where(Order.status == OrderStatus.COMPLETED)
    )

    return TodayStats(
        total_orders=total_orders or 0,
        total_revenue=total_revenue or 0,
        completed_orders=completed.scalar() or 0,
    )


async def get_menu_ranking(db: AsyncSession) -> list[MenuRankingEntry]:
    """Items sold today grouped by name, best sellers first."""
    total_quantity = func.sum(OrderItem.quantity).label("total_quantity")
    total_revenue = func.sum(OrderItem.unit_price * OrderItem.quantity).label("total_revenue")

    result = await db.execute(
        select(OrderItem.name, total_quantity, total_revenue)
        .join(Order, OrderItem.order_id == Order.id)
        .where(*_today_filter())
        .group_by(OrderItem.name)
        .order_by(total_quantity.desc(), OrderItem.name)
    )
    return [
        MenuRankingEntry(name=name, total_quantity=quantity, total_revenue=revenue)
        for name, quantity, revenue in result.all()
    ]


async def get_stats(db: AsyncSession) -> StatsResponse:
    return StatsResponse(
        today=await get_today_stats(db),
        menu_ranking=await get_menu_ranking(db),
    )


async def list_today_orders(db: AsyncSession) -> list[Order]:
    """All of today's orders (any status), oldest first, for the daily export."""
    start, end = today_range()
    result = await db.execute(
        select(Order)
        .where(Order.created_at >= start, Order.created_at < end)
        .order_by(Order.created_at.asc(), Order.id.asc())
    )
    return list(result.scalars().all())
