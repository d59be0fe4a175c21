import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

# Settings are read once on first import of kiosk, so the environment
# must point at throwaway locations before anything imports it.
_TMP = Path(tempfile.mkdtemp(prefix="kiosk-tests-"))
os.environ["ENV_MODE"] = "development"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP / 'kiosk.db'}"
os.environ["DATA_DIRECTORY"] = str(_TMP / "data")
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["REDIS_URL"] = "redis://127.0.0.1:1/0"

ADMIN = ("admin", "admin123")
STAFF = ("22user", "user123")


def _reset_database() -> None:
    from kiosk.database import Base, engine
    from kiosk import models  # noqa: F401

    async def reset():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(reset())


@pytest.fixture()
def app():
    """
    Fresh database and empty workbook for every test.
    """
    from kiosk.main import app as kiosk_app
    from kiosk.services.excel_manager import ExcelManager

    _reset_database()
    ExcelManager.clear_all()
    return kiosk_app


@pytest.fixture()
def client(app):
    """
    Anonymous client. Entering the context runs the lifespan, which seeds
    the bootstrap accounts and creates the live state.
    """
    with TestClient(app) as c:
        yield c


def login(app, path: str, username: str, password: str) -> TestClient:
    c = TestClient(app)
    r = c.post(f"/api/auth/{path}", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return c


@pytest.fixture()
def admin(app, client) -> TestClient:
    return login(app, "login", *ADMIN)


@pytest.fixture()
def staff(app, client) -> TestClient:
    return login(app, "client-login", *STAFF)


@pytest.fixture()
def live_state(app, client):
    return app.state.live_state


@pytest.fixture()
def menu(admin) -> Dict[str, Any]:
    """
    Small menu: Tea (1000) and Tteokbokki (4000, Spice option group).
    """
    cat = admin.post("/api/categories", json={"name": "Snacks", "sort_order": 1}).json()
    tea = admin.post(
        "/api/menu", json={"category_id": cat["id"], "name": "Tea", "price": 1000}
    ).json()
    tteok = admin.post(
        "/api/menu", json={"category_id": cat["id"], "name": "Tteokbokki", "price": 4000}
    ).json()
    group = admin.post(
        "/api/options/groups",
        json={"menu_item_id": tteok["id"], "name": "Spice", "is_required": True},
    ).json()
    hot = admin.post(
        "/api/options/choices",
        json={"option_group_id": group["id"], "name": "Extra hot", "price_modifier": 500},
    ).json()
    return {"category": cat, "tea": tea, "tteokbokki": tteok, "spice": group, "extra_hot": hot}


def cart_line(item: Dict[str, Any], quantity: int = 1, options: List[Dict[str, Any]] = ()) -> Dict[str, Any]:
    return {
        "menuItemId": item["id"],
        "name": item["name"],
        "price": item["price"],
        "quantity": quantity,
        "options": list(options),
    }


def sse_payload(frame: str) -> Dict[str, Any]:
    """Decode the data line of one SSE frame."""
    for line in frame.splitlines():
        if line.startswith("data: "):
            return json.loads(line[len("data: "):])
    raise AssertionError(f"no data line in {frame!r}")
