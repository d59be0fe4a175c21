from __future__ import annotations

import asyncio

from conftest import login

from kiosk.database import async_session_maker
from kiosk.services.accounts import get_account_by_username


def _admin_id() -> int:
    async def lookup():
        async with async_session_maker() as db:
            return (await get_account_by_username(db, "admin")).id

    return asyncio.run(lookup())


def test_users_endpoints_need_admin(client, staff):
    assert client.get("/api/users").status_code == 401
    assert staff.get("/api/users").status_code == 401


def test_list_hides_admin(admin):
    users = admin.get("/api/users").json()
    assert [u["username"] for u in users] == ["22user"]
    assert "password_hash" not in users[0]


def test_create_user_and_duplicate(app, admin):
    r = admin.post(
        "/api/users",
        json={"username": "grill", "password": "1234", "can_access_order": False},
    )
    assert r.status_code == 201
    assert r.json()["success"] is True

    users = admin.get("/api/users").json()
    assert users[0]["username"] == "grill"
    assert users[0]["can_access_order"] is False
    assert users[0]["can_access_cooking"] is True

    dup = admin.post("/api/users", json={"username": "grill", "password": "abcd"})
    assert dup.status_code == 409

    grill = login(app, "client-login", "grill", "1234")
    assert grill.get("/api/auth/verify-client").json()["permissions"]["can_access_order"] is False


def test_create_user_validation(admin):
    assert admin.post("/api/users", json={"username": "x", "password": "1234"}).status_code == 422
    assert admin.post("/api/users", json={"username": "xy", "password": "123"}).status_code == 422


def test_update_permissions_applies_to_live_sessions(app, admin):
    uid = admin.post("/api/users", json={"username": "fry", "password": "1234"}).json()["id"]
    fry = login(app, "client-login", "fry", "1234")

    r = admin.put(f"/api/users/{uid}", json={"can_access_cooking": False, "can_access_order": True})
    assert r.status_code == 200
    assert r.json()["can_access_cooking"] is False

    perms = fry.get("/api/auth/verify-client").json()["permissions"]
    assert perms == {"can_access_cooking": False, "can_access_order": True}


def test_admin_account_is_protected(admin):
    admin_id = _admin_id()
    body = {"can_access_cooking": False, "can_access_order": False}

    assert admin.put(f"/api/users/{admin_id}", json=body).status_code == 403
    assert admin.delete(f"/api/users/{admin_id}").status_code == 403
    assert admin.get("/api/auth/verify-admin").status_code == 200


def test_unknown_user(admin):
    body = {"can_access_cooking": True, "can_access_order": True}
    assert admin.put("/api/users/999", json=body).status_code == 404
    assert admin.delete("/api/users/999").status_code == 404


def test_delete_user(admin):
    uid = admin.post("/api/users", json={"username": "temp", "password": "1234"}).json()["id"]
    assert admin.delete(f"/api/users/{uid}").status_code == 200
    assert "temp" not in [u["username"] for u in admin.get("/api/users").json()]
