"""
Sales Statistics Endpoints (admin only)
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.database import get_db
from kiosk.dependencies import require_admin
from kiosk.schemas import ExportResponse, StatsResponse
from kiosk.services import stats
from kiosk.services.orders import order_snapshot
from kiosk.tasks import export_daily_report

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/stats",
    tags=["Stats"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=StatsResponse)
async def get_stats(db: AsyncSession = Depends(get_db)) -> StatsResponse:
    """Today's totals (cancelled orders excluded) and best sellers."""
    return await stats.get_stats(db)


@router.post("/export", response_model=ExportResponse)
async def export_today(db: AsyncSession = Depends(get_db)) -> ExportResponse:
    """Rewrite the spreadsheet with all of today's orders."""
    orders = [order_snapshot(order) for order in await stats.list_today_orders(db)]

    try:
        task = export_daily_report.delay(orders)
    except Exception as e:
        logger.warning(f"Could not queue daily report: {e}")
        return ExportResponse(success=False, orders=len(orders))

    logger.info(f"Daily report queued: {len(orders)} order(s), task {task.id}")
    return ExportResponse(success=True, task_id=task.id, orders=len(orders))
