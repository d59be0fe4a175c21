"""
Rush-Hour Simulation Script

Fires concurrent kiosk orders at a running server and walks them through
the kitchen, to check order numbering, the live streams and the Excel
export under load.
Run from project root: python scripts/simulate.py --orders 50
"""

import argparse
import asyncio
import random
import sys
import time
from typing import Any, Optional

import httpx

# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Configuration
API_BASE_URL = "http://localhost:8001"

DEMO_MENU = {
    "Snacks": [
        {"name": "Tteokbokki", "price": 4000, "options": ("Spice", [("Mild", 0), ("Hot", 0), ("Extra hot", 500)])},
        {"name": "Fish Cake Skewer", "price": 1500, "options": None},
        {"name": "Gimbap", "price": 3500, "options": ("Size", [("Regular", 0), ("Large", 1000)])},
    ],
    "Drinks": [
        {"name": "Lemonade", "price": 2500, "options": ("Ice", [("Normal", 0), ("Less", 0)])},
        {"name": "Sikhye", "price": 2000, "options": None},
    ],
}


# =============================================================================
# SETUP
# =============================================================================

async def login(client: httpx.AsyncClient, path: str, username: str, password: str) -> None:
    response = await client.post(
        f"{API_BASE_URL}/api/auth/{path}",
        json={"username": username, "password": password},
    )
    response.raise_for_status()


async def seed_demo_menu(admin: httpx.AsyncClient) -> None:
    """Create the demo menu (only called when the menu is empty)."""
    for sort_order, (category_name, items) in enumerate(DEMO_MENU.items()):
        response = await admin.post(
            f"{API_BASE_URL}/api/categories",
            json={"name": category_name, "sort_order": sort_order},
        )
        response.raise_for_status()
        category_id = response.json()["id"]

        for item in items:
            response = await admin.post(
                f"{API_BASE_URL}/api/menu",
                json={"category_id": category_id, "name": item["name"], "price": item["price"]},
            )
            response.raise_for_status()
            if item["options"] is None:
                continue

            group_name, choices = item["options"]
            response = await admin.post(
                f"{API_BASE_URL}/api/options/groups",
                json={"menu_item_id": response.json()["id"], "name": group_name, "is_required": True},
            )
            response.raise_for_status()
            group_id = response.json()["id"]
            for index, (choice_name, modifier) in enumerate(choices):
                response = await admin.post(
                    f"{API_BASE_URL}/api/options/choices",
                    json={
                        "option_group_id": group_id,
                        "name": choice_name,
                        "price_modifier": modifier,
                        "is_default": index == 0,
                    },
                )
                response.raise_for_status()
    print(f"🌱 Demo menu created ({sum(len(v) for v in DEMO_MENU.values())} items)")


async def load_menu(client: httpx.AsyncClient) -> list[dict[str, Any]]:
    response = await client.get(f"{API_BASE_URL}/api/menu", params={"with_options": True})
    response.raise_for_status()
    return [item for item in response.json() if item["is_available"]]


# =============================================================================
# ORDERS
# =============================================================================

def generate_cart(menu: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Random cart of 1-4 lines, picking one choice per option group."""
    lines = []
    for item in random.sample(menu, k=min(len(menu), random.randint(1, 4))):
        options = []
        for group in item.get("optionGroups", []):
            if group["choices"]:
                choice = random.choice(group["choices"])
                options.append({
                    "groupName": group["name"],
                    "choiceName": choice["name"],
                    "priceModifier": choice["price_modifier"],
                })
        lines.append({
            "menuItemId": item["id"],
            "name": item["name"],
            "price": item["price"],
            "quantity": random.randint(1, 3),
            "options": options,
        })
    return lines


async def send_order(
    client: httpx.AsyncClient,
    menu: list[dict[str, Any]],
    order_num: int,
) -> dict[str, Any]:
    """Mirror the order screen: push the cart, then submit it."""
    lines = generate_cart(menu)
    start_time = time.time()

    try:
        await client.post(f"{API_BASE_URL}/api/cart", json={"items": lines}, timeout=30.0)
        response = await client.post(f"{API_BASE_URL}/api/orders", json={"items": lines}, timeout=30.0)
        elapsed = round(time.time() - start_time, 3)

        if response.status_code == 200:
            data = response.json()
            return {
                "order_num": order_num,
                "success": True,
                "order_id": data.get("orderId"),
                "order_number": data.get("orderNumber"),
                "total": data.get("totalPrice"),
                "time": elapsed,
            }
        return {
            "order_num": order_num,
            "success": False,
            "error": response.text[:100],
            "time": elapsed,
        }
    except httpx.HTTPError as e:
        return {
            "order_num": order_num,
            "success": False,
            "error": str(e)[:100],
            "time": round(time.time() - start_time, 3),
        }


async def run_kitchen(client: httpx.AsyncClient, order_ids: list[int], cancel_rate: float) -> dict[str, int]:
    """Move every order to cooking, then completed (or cancelled)."""
    outcome = {"completed": 0, "cancelled": 0, "failed": 0}
    for order_id in order_ids:
        final = "cancelled" if random.random() < cancel_rate else "completed"
        steps = ["cooking", final] if final == "completed" else [final]
        for status in steps:
            response = await client.patch(f"{API_BASE_URL}/api/orders/{order_id}", json={"status": status})
            if response.status_code != 200:
                outcome["failed"] += 1
                break
        else:
            outcome[final] += 1
    return outcome


# =============================================================================
# MAIN
# =============================================================================

async def run_simulation(
    num_orders: int,
    username: str,
    password: str,
    admin_password: Optional[str],
    cancel_rate: float,
) -> dict[str, Any]:
    print("=" * 70)
    print("🍢 KIOSK RUSH-HOUR SIMULATION")
    print("=" * 70)
    print(f"📡 Server: {API_BASE_URL}")
    print(f"📦 Orders: {num_orders}")

    async with httpx.AsyncClient() as client:
        health = await client.get(f"{API_BASE_URL}/health")
        health.raise_for_status()
        print(f"✅ Health: {health.json().get('status')} (redis: {health.json().get('redis')})")

        await login(client, "client-login", username, password)
        menu = await load_menu(client)

        if not menu:
            if admin_password is None:
                print("❌ Menu is empty. Pass --admin-password to seed a demo menu.")
                return {"successful": 0, "failed": num_orders}
            async with httpx.AsyncClient() as admin:
                await login(admin, "login", "admin", admin_password)
                await seed_demo_menu(admin)
            menu = await load_menu(client)

        start_time = time.time()
        results = await asyncio.gather(*[send_order(client, menu, i + 1) for i in range(num_orders)])
        total_time = round(time.time() - start_time, 2)

        successful = [r for r in results if r["success"]]
        failed = [r for r in results if not r["success"]]

        print("\n" + "=" * 70)
        print("📊 RESULTS")
        print("=" * 70)
        print(f"✅ Successful: {len(successful)}/{num_orders}")
        print(f"❌ Failed: {len(failed)}")
        print(f"⏱️  Total Time: {total_time}s")

        if successful:
            numbers = [r["order_number"] for r in successful]
            duplicates = len(numbers) - len(set(numbers))
            avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
            print(f"\n📈 Average Response: {avg_time}s")
            print(f"   Order numbers: {min(numbers)}..{max(numbers)} ({duplicates} duplicate(s))")
            print(f"   💰 Total: {sum(r['total'] for r in successful):,}원")

            kitchen = await run_kitchen(client, [r["order_id"] for r in successful], cancel_rate)
            print(f"\n👩‍🍳 Kitchen: {kitchen}")

        if failed:
            print("\n⚠️  Failed Order Details (showing first 5):")
            for f in failed[:5]:
                print(f"   Order #{f['order_num']}: {f.get('error', 'Unknown error')}")

    print("\n" + "=" * 70)
    print("🔍 NEXT: python scripts/verify.py  (Excel integrity)")
    print("=" * 70)

    return {"successful": len(successful), "failed": len(failed), "total_time": total_time}


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Kiosk rush-hour simulation")
    parser.add_argument("--orders", type=int, default=50, help="Number of orders")
    parser.add_argument("--username", default="22user", help="Kiosk account")
    parser.add_argument("--password", default="user123", help="Kiosk account password")
    parser.add_argument("--admin-password", default=None, help="Seed a demo menu if the menu is empty")
    parser.add_argument("--cancel-rate", type=float, default=0.1, help="Share of orders cancelled")
    parser.add_argument("--url", default=API_BASE_URL, help="Server base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url.rstrip("/")
    asyncio.run(run_simulation(
        args.orders, args.username, args.password, args.admin_password, args.cancel_rate
    ))
