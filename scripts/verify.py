"""
Excel Verification Script

Checks the order workbook after a simulation run.
Run from project root: python scripts/verify.py
"""

import sys
from datetime import datetime
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from kiosk.services.excel_manager import ORDERS_FILE, ExcelManager


def verify_excel() -> bool:
    """Report row count, duplicates, status mix and revenue of the workbook."""
    print("=" * 60)
    print("🔍 EXCEL VERIFICATION REPORT")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"📄 File: {ORDERS_FILE}")
    print("=" * 60)

    if not ORDERS_FILE.exists():
        print("\n❌ Excel file not found!")
        print("   Run the simulation first: python scripts/simulate.py")
        return False

    try:
        df = pd.read_excel(ORDERS_FILE, engine="openpyxl")
    except Exception as e:
        print(f"\n❌ Could not read Excel file: {e}")
        return False
    print("\n✅ File loaded successfully!")

    print("\n📊 STATISTICS:")
    print(f"   Rows: {len(df)}")

    missing = [col for col in ExcelManager.ORDER_COLUMNS if col not in df.columns]
    if missing:
        print(f"\n⚠️ Missing Columns: {missing}")
        return False
    print("✅ All columns present")

    duplicates = int(df["order_id"].duplicated().sum())
    if duplicates:
        print(f"⚠️ {duplicates} duplicate order IDs found!")
    else:
        print("✅ One row per order")

    print("\n🍳 STATUS:")
    for status, count in df["status"].value_counts().items():
        print(f"   {status}: {count}")

    billable = df[df["status"] != "cancelled"]
    print("\n💰 REVENUE (cancelled excluded):")
    print(f"   Total: {int(billable['total_price'].sum()):,}원")
    if len(billable):
        print(f"   Average: {billable['total_price'].mean():,.0f}원")

    print("\n📋 RECENT ORDERS:")
    print("-" * 60)
    print(df[["order_id", "order_number", "status", "total_price"]].tail(5).to_string(index=False))

    print("\n" + "=" * 60)
    print("✅ VERIFICATION COMPLETE" if not duplicates else "⚠️ VERIFICATION FOUND ISSUES")
    print("=" * 60)
    return not duplicates


if __name__ == "__main__":
    sys.exit(0 if verify_excel() else 1)
