from __future__ import annotations

from conftest import ADMIN, STAFF, login

from kiosk.core.security import ADMIN_COOKIE_NAME, CLIENT_COOKIE_NAME


def test_admin_login_sets_cookie_and_verifies(app, client):
    r = client.post("/api/auth/login", json={"username": ADMIN[0], "password": ADMIN[1]})
    assert r.status_code == 200
    assert r.json()["success"] is True
    assert client.cookies.get(ADMIN_COOKIE_NAME)
    assert "httponly" in r.headers["set-cookie"].lower()

    r2 = client.get("/api/auth/verify-admin")
    assert r2.status_code == 200
    assert r2.json() == {"authenticated": True, "user": {"username": "admin"}}


def test_admin_login_rejects_bad_password(client):
    r = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
    assert r.status_code == 401
    body = r.json()
    assert body["success"] is False
    assert body["error"] == "Unauthorized"
    assert client.cookies.get(ADMIN_COOKIE_NAME) is None


def test_staff_account_cannot_get_admin_session(client):
    r = client.post("/api/auth/login", json={"username": STAFF[0], "password": STAFF[1]})
    assert r.status_code == 401


def test_client_login_reports_permissions(staff):
    r = staff.get("/api/auth/verify-client")
    assert r.status_code == 200
    data = r.json()
    assert data["authenticated"] is True
    assert data["user"] == {"username": "22user"}
    assert data["permissions"] == {"can_access_cooking": True, "can_access_order": True}


def test_client_token_is_not_an_admin_token(app, staff):
    token = staff.cookies.get(CLIENT_COOKIE_NAME)
    assert token

    staff.cookies.set(ADMIN_COOKIE_NAME, token)
    assert staff.get("/api/auth/verify-admin").status_code == 401
    assert staff.get("/api/stats").status_code == 401


def test_tampered_token_is_rejected(client):
    client.cookies.set(CLIENT_COOKIE_NAME, "eyJ1aWQiOjF9.forged.signature")
    assert client.get("/api/auth/verify-client").status_code == 401


def test_admin_session_satisfies_client_checks(admin):
    r = admin.get("/api/auth/verify-client")
    assert r.status_code == 200
    assert r.json()["permissions"] == {"can_access_cooking": True, "can_access_order": True}


def test_logout_clears_both_sessions(app, client):
    c = login(app, "login", *ADMIN)
    r = c.post("/api/auth/client-login", json={"username": ADMIN[0], "password": ADMIN[1]})
    assert r.status_code == 200

    assert c.post("/api/auth/logout").status_code == 200

    assert c.get("/api/auth/verify-admin").status_code == 401
    assert c.get("/api/auth/verify-client").status_code == 401


def test_anonymous_verify_is_401(client):
    r = client.get("/api/auth/verify-client")
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_deleted_account_session_stops_working(app, admin):
    created = admin.post(
        "/api/users", json={"username": "till1", "password": "pass1234"}
    ).json()
    till = login(app, "client-login", "till1", "pass1234")
    assert till.get("/api/auth/verify-client").status_code == 200

    assert admin.delete(f"/api/users/{created['id']}").status_code == 200
    assert till.get("/api/auth/verify-client").status_code == 401


def test_login_validation_error(client):
    r = client.post("/api/auth/login", json={"username": "admin"})
    assert r.status_code == 422
