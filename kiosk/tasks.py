"""
Celery Tasks
Background spreadsheet exports, so order requests never wait on file I/O.
"""

import logging
import time
from datetime import datetime

from kiosk.celery_worker import celery_app
from kiosk.services.excel_manager import ExcelManager

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    max_retries=3,
    default_retry_delay=5,
    autoretry_for=(OSError,),
    retry_backoff=True
)
def export_order_to_excel(self, order: dict) -> dict:
    """
    Upsert one order row in the workbook.

    Args:
        order: Order snapshot (same shape as the order_update stream payload)

    Returns:
        dict: Result of the export operation
    """
    task_id = self.request.id
    order_id = order.get("id", "unknown")

    logger.info(f"📋 Task {task_id}: exporting order #{order_id} ({order.get('status')})")
    start_time = time.time()

    result = ExcelManager.upsert_order(order)

    elapsed = round(time.time() - start_time, 3)
    result["task_id"] = task_id
    result["processing_time_seconds"] = elapsed

    if result["success"]:
        logger.info(f"✅ Task {task_id}: order #{order_id} done in {elapsed}s")
    else:
        logger.warning(f"⚠️ Task {task_id}: order #{order_id} failed - {result['message']}")

    return result


@celery_app.task(bind=True)
def export_daily_report(self, orders: list) -> dict:
    """Rewrite the workbook with the given order snapshots."""
    logger.info(f"📋 Task {self.request.id}: daily report with {len(orders)} order(s)")
    result = ExcelManager.write_report(orders)
    result["task_id"] = self.request.id
    return result


@celery_app.task
def clear_excel_file() -> dict:
    """Delete the workbook after the orders have been wiped."""
    success = ExcelManager.clear_all()
    return {
        "success": success,
        "message": "Excel file cleared" if success else "Failed to clear Excel file",
        "timestamp": datetime.now().isoformat(),
    }
