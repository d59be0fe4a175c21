"""
Excel Order Workbook with Concurrency Control

Keeps a spreadsheet copy of the orders for the event organisers:
- one row per order, upserted on creation and every status change
- full rewrite for the daily report
- wiped together with the orders

Celery workers and eager in-process tasks may touch the file at the same
time, so every read-modify-write happens under a FileLock.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd
from filelock import FileLock, Timeout

from kiosk.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

DATA_DIR = Path(settings.data_directory)
ORDERS_FILE = DATA_DIR / settings.excel_filename
ORDERS_LOCK = DATA_DIR / f"{settings.excel_filename}.lock"


def format_items(items: list[dict[str, Any]]) -> str:
    """Render order lines as one cell: 'Tteokbokki x2 (Spice: Hot); Tea x1'."""
    parts = []
    for item in items:
        text = f"{item.get('name')} x{item.get('quantity')}"
        options = item.get("options") or []
        if options:
            chosen = ", ".join(f"{o.get('groupName')}: {o.get('choiceName')}" for o in options)
            text += f" ({chosen})"
        parts.append(text)
    return "; ".join(parts)


class ExcelManager:
    """Process-safe Excel order workbook."""

    LOCK_TIMEOUT = settings.excel_lock_timeout

    ORDER_COLUMNS = [
        "order_id",
        "order_number",
        "date_time",
        "status",
        "items",
        "item_count",
        "total_price",
        "completed_at",
        "exported_at",
    ]

    @classmethod
    def _ensure_data_dir(cls) -> None:
        if not DATA_DIR.exists():
            DATA_DIR.mkdir(parents=True, exist_ok=True)
            logger.info(f"Created data directory: {DATA_DIR}")

    @classmethod
    def _load_or_create_df(cls) -> pd.DataFrame:
        if ORDERS_FILE.exists():
            try:
                return pd.read_excel(ORDERS_FILE, engine="openpyxl")
            except Exception as e:
                logger.warning(f"Error reading {ORDERS_FILE}, starting a new sheet: {e}")
        return pd.DataFrame(columns=cls.ORDER_COLUMNS)

    @classmethod
    def _to_row(cls, order: dict[str, Any], export_time: str) -> dict[str, Any]:
        items = order.get("items") or []
        return {
            "order_id": order.get("id"),
            "order_number": order.get("order_number"),
            "date_time": order.get("created_at", export_time),
            "status": order.get("status"),
            "items": format_items(items),
            "item_count": sum(item.get("quantity", 0) for item in items),
            "total_price": order.get("total_price"),
            "completed_at": order.get("completed_at"),
            "exported_at": export_time,
        }

    @classmethod
    def upsert_order(cls, order: dict[str, Any]) -> dict[str, Any]:
        """
        Insert or replace the row of one order.

        Args:
            order: Order snapshot as produced by the order service

        Returns:
            Result dict with success flag and message
        """
        cls._ensure_data_dir()

        order_id = order.get("id")
        result = {
            "success": False,
            "message": "",
            "order_id": order_id,
            "exported_at": None,
        }

        try:
            with FileLock(str(ORDERS_LOCK), timeout=cls.LOCK_TIMEOUT):
                logger.debug(f"Lock acquired for Order #{order_id}")

                df = cls._load_or_create_df()
                export_time = datetime.now().isoformat()

                if not df.empty:
                    df = df[df["order_id"] != order_id]
                row = pd.DataFrame([cls._to_row(order, export_time)], columns=cls.ORDER_COLUMNS)
                df = row if df.empty else pd.concat([df, row], ignore_index=True)
                df = df.sort_values("order_id", kind="stable")
                df.to_excel(str(ORDERS_FILE), index=False, engine="openpyxl")

                logger.info(f"Order #{order_id} written to Excel ({order.get('status')})")
                result["success"] = True
                result["message"] = f"Order #{order_id} exported"
                result["exported_at"] = export_time

        except Timeout:
            result["message"] = f"Lock timeout ({cls.LOCK_TIMEOUT}s)"
            logger.error(f"Lock timeout for Order #{order_id}")

        return result

    @classmethod
    def write_report(cls, orders: list[dict[str, Any]]) -> dict[str, Any]:
        """Replace the whole workbook with the given orders."""
        cls._ensure_data_dir()
        result = {"success": False, "message": "", "orders": len(orders)}

        try:
            with FileLock(str(ORDERS_LOCK), timeout=cls.LOCK_TIMEOUT):
                export_time = datetime.now().isoformat()
                df = pd.DataFrame(
                    [cls._to_row(order, export_time) for order in orders],
                    columns=cls.ORDER_COLUMNS,
                )
                df.to_excel(str(ORDERS_FILE), index=False, engine="openpyxl")

            logger.info(f"Report written: {len(orders)} order(s)")
            result["success"] = True
            result["message"] = f"{len(orders)} order(s) exported"

        except Timeout:
            result["message"] = f"Lock timeout ({cls.LOCK_TIMEOUT}s)"
            logger.error("Lock timeout while writing report")

        return result

    @classmethod
    def get_all_orders(cls) -> list[dict[str, Any]]:
        """Read every row of the workbook."""
        if not ORDERS_FILE.exists():
            return []

        try:
            df = pd.read_excel(ORDERS_FILE, engine="openpyxl")
            return df.to_dict("records")
        except Exception as e:
            logger.error(f"Error reading orders: {e}")
            return []

    @classmethod
    def clear_all(cls) -> bool:
        """Delete the workbook."""
        cls._ensure_data_dir()
        try:
            with FileLock(str(ORDERS_LOCK), timeout=cls.LOCK_TIMEOUT):
                if ORDERS_FILE.exists():
                    ORDERS_FILE.unlink()
            logger.info("Excel workbook cleared")
            return True
        except Timeout:
            logger.error("Lock timeout while clearing workbook")
            return False
