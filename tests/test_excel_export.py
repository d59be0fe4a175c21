from __future__ import annotations

import pytest

from kiosk.services.excel_manager import ORDERS_FILE, ExcelManager, format_items
from kiosk.tasks import clear_excel_file, export_order_to_excel


@pytest.fixture(autouse=True)
def _empty_workbook():
    ExcelManager.clear_all()
    yield
    ExcelManager.clear_all()


def _snapshot(order_id: int, status: str = "pending", number: int = 1) -> dict:
    return {
        "id": order_id,
        "order_number": number,
        "status": status,
        "total_price": 5000,
        "created_at": "2026-10-19T12:00:00",
        "completed_at": None,
        "items": [
            {
                "name": "Gimbap",
                "quantity": 2,
                "options": [{"groupName": "Size", "choiceName": "Large", "priceModifier": 1000}],
            },
            {"name": "Tea", "quantity": 1, "options": []},
        ],
    }


def test_format_items():
    assert format_items(_snapshot(1)["items"]) == "Gimbap x2 (Size: Large); Tea x1"
    assert format_items([]) == ""


def test_upsert_replaces_row_of_same_order():
    assert ExcelManager.upsert_order(_snapshot(1))["success"] is True
    assert ExcelManager.upsert_order(_snapshot(2, number=2))["success"] is True
    assert ExcelManager.upsert_order(_snapshot(1, status="cooking"))["success"] is True

    rows = ExcelManager.get_all_orders()
    assert [(r["order_id"], r["status"]) for r in rows] == [(1, "cooking"), (2, "pending")]
    assert rows[0]["item_count"] == 3
    assert list(rows[0]) == ExcelManager.ORDER_COLUMNS


def test_write_report_replaces_everything():
    ExcelManager.upsert_order(_snapshot(9))

    result = ExcelManager.write_report([_snapshot(1), _snapshot(2, number=2)])

    assert result["success"] is True
    assert [r["order_id"] for r in ExcelManager.get_all_orders()] == [1, 2]


def test_clear_all_removes_file():
    ExcelManager.upsert_order(_snapshot(1))
    assert ORDERS_FILE.exists()

    assert ExcelManager.clear_all() is True
    assert not ORDERS_FILE.exists()
    assert ExcelManager.get_all_orders() == []


def test_tasks_run_eagerly():
    result = export_order_to_excel.delay(_snapshot(3)).get()
    assert result["success"] is True
    assert result["order_id"] == 3

    assert clear_excel_file.delay().get()["success"] is True
    assert not ORDERS_FILE.exists()
