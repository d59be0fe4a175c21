from __future__ import annotations

from conftest import cart_line, login

from kiosk.services.excel_manager import ExcelManager


def _spicy(menu, quantity=1):
    option = {"groupName": "Spice", "choiceName": "Extra hot", "priceModifier": 500}
    return cart_line(menu["tteokbokki"], quantity, [option])


def test_order_needs_session_and_permission(app, client, admin, menu):
    body = {"items": [cart_line(menu["tea"])]}
    assert client.post("/api/orders", json=body).status_code == 401

    created = admin.post(
        "/api/users",
        json={"username": "kitchen1", "password": "pass1234", "can_access_order": False},
    ).json()
    kitchen = login(app, "client-login", "kitchen1", "pass1234")
    r = kitchen.post("/api/orders", json=body)
    assert r.status_code == 403
    assert r.json()["error"] == "Forbidden"
    assert created["success"] is True


def test_create_order_computes_totals(staff, client, menu):
    r = staff.post("/api/orders", json={"items": [_spicy(menu, 2), cart_line(menu["tea"], 3)]})
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert data["orderNumber"] == 1
    assert data["totalPrice"] == (4000 + 500) * 2 + 1000 * 3

    order = client.get(f"/api/orders/{data['orderId']}").json()
    assert order["status"] == "pending"
    assert order["items"][0]["unit_price"] == 4500
    assert order["items"][0]["options"] == [
        {"groupName": "Spice", "choiceName": "Extra hot", "priceModifier": 500}
    ]
    assert order["items"][1]["options"] == []

    again = staff.post("/api/orders", json={"items": [cart_line(menu["tea"])]}).json()
    assert again["orderNumber"] == 2


def test_order_rejects_bad_items(staff, menu):
    assert staff.post("/api/orders", json={"items": []}).status_code == 422

    ghost = {"id": 999, "name": "Ghost", "price": 100}
    r = staff.post("/api/orders", json={"items": [cart_line(ghost)]})
    assert r.status_code == 404

    bad_qty = cart_line(menu["tea"], 0)
    assert staff.post("/api/orders", json={"items": [bad_qty]}).status_code == 422


def test_order_clears_cart_and_broadcasts(staff, client, live_state, menu):
    lines = [cart_line(menu["tea"], 2)]
    r = staff.post("/api/cart", json={"items": lines})
    assert r.status_code == 200
    assert r.json()["totalPrice"] == 2000
    assert client.get("/api/cart").json()["totalPrice"] == 2000

    cart_events = []
    order_events = []
    live_state.subscribe_cart(cart_events.append)
    live_state.subscribe_orders(order_events.append)

    created = staff.post("/api/orders", json={"items": lines}).json()

    cart = client.get("/api/cart").json()
    assert cart["items"] == [] and cart["totalPrice"] == 0
    assert cart_events[-1].data["items"] == []

    assert len(order_events) == 1
    assert order_events[0].type == "order_update"
    assert order_events[0].data["id"] == created["orderId"]
    assert order_events[0].data["status"] == "pending"


def test_order_lifecycle(staff, client, live_state, menu):
    seen = []
    live_state.subscribe_orders(seen.append)

    order_id = staff.post("/api/orders", json={"items": [cart_line(menu["tea"])]}).json()["orderId"]

    r = staff.patch(f"/api/orders/{order_id}", json={"status": "cooking"})
    assert r.status_code == 200
    assert r.json()["status"] == "cooking"
    assert r.json()["completed_at"] is None

    r = staff.patch(f"/api/orders/{order_id}", json={"status": "completed"})
    assert r.status_code == 200
    assert r.json()["completed_at"] is not None

    assert [e.data["status"] for e in seen] == ["pending", "cooking", "completed"]
    assert client.get(f"/api/orders/{order_id}").json()["status"] == "completed"


def test_invalid_transitions_conflict(staff, menu):
    order_id = staff.post("/api/orders", json={"items": [cart_line(menu["tea"])]}).json()["orderId"]

    assert staff.patch(f"/api/orders/{order_id}", json={"status": "completed"}).status_code == 409
    assert staff.patch(f"/api/orders/{order_id}", json={"status": "pending"}).status_code == 409
    assert staff.patch(f"/api/orders/{order_id}", json={"status": "cancelled"}).status_code == 200

    r = staff.patch(f"/api/orders/{order_id}", json={"status": "cooking"})
    assert r.status_code == 409
    assert r.json()["error"] == "Conflict"


def test_unknown_status_and_order(staff, menu):
    order_id = staff.post("/api/orders", json={"items": [cart_line(menu["tea"])]}).json()["orderId"]
    assert staff.patch(f"/api/orders/{order_id}", json={"status": "served"}).status_code == 422
    assert staff.patch("/api/orders/999", json={"status": "cooking"}).status_code == 404
    assert staff.get("/api/orders/999").status_code == 404


def test_status_change_needs_cooking_permission(app, admin, staff, menu):
    admin.post(
        "/api/users",
        json={"username": "till2", "password": "pass1234", "can_access_cooking": False},
    )
    till = login(app, "client-login", "till2", "pass1234")
    order_id = till.post("/api/orders", json={"items": [cart_line(menu["tea"])]}).json()["orderId"]

    assert till.patch(f"/api/orders/{order_id}", json={"status": "cooking"}).status_code == 403


def test_active_orders_oldest_first(staff, client, menu):
    ids = [
        staff.post("/api/orders", json={"items": [cart_line(menu["tea"])]}).json()["orderId"]
        for _ in range(3)
    ]
    staff.patch(f"/api/orders/{ids[0]}", json={"status": "cooking"})
    staff.patch(f"/api/orders/{ids[0]}", json={"status": "completed"})
    staff.patch(f"/api/orders/{ids[2]}", json={"status": "cooking"})

    active = client.get("/api/orders", params={"active": True}).json()
    assert [o["id"] for o in active] == [ids[1], ids[2]]

    everything = client.get("/api/orders").json()
    assert [o["id"] for o in everything] == list(reversed(ids))

    completed = client.get("/api/orders", params={"status": "completed"}).json()
    assert [o["id"] for o in completed] == [ids[0]]


def test_clear_orders_needs_master_password(staff, admin, client, menu):
    staff.post("/api/orders", json={"items": [cart_line(menu["tea"])]})
    staff.post("/api/orders", json={"items": [cart_line(menu["tea"])]})

    assert staff.post("/api/orders/clear", json={"password": "5678"}).status_code == 401
    assert admin.post("/api/orders/clear", json={"password": "0000"}).status_code == 403
    assert len(client.get("/api/orders").json()) == 2

    r = admin.post("/api/orders/clear", json={"password": "5678"})
    assert r.status_code == 200
    assert client.get("/api/orders").json() == []
    assert ExcelManager.get_all_orders() == []

    fresh = staff.post("/api/orders", json={"items": [cart_line(menu["tea"])]}).json()
    assert fresh["orderNumber"] == 1


def test_orders_are_exported_to_workbook(staff, menu):
    order_id = staff.post("/api/orders", json={"items": [_spicy(menu)]}).json()["orderId"]
    staff.patch(f"/api/orders/{order_id}", json={"status": "cooking"})

    rows = ExcelManager.get_all_orders()
    assert len(rows) == 1
    assert rows[0]["order_id"] == order_id
    assert rows[0]["status"] == "cooking"
    assert rows[0]["items"] == "Tteokbokki x1 (Spice: Extra hot)"
    assert rows[0]["total_price"] == 4500
