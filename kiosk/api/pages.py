"""
HTML Screens

Thin Jinja2 shells; all data arrives through the JSON API and the event
streams once the page is loaded.
"""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from kiosk.core.config import get_settings

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["Pages"], include_in_schema=False)


def _render(request: Request, name: str, title: str) -> HTMLResponse:
    settings = get_settings()
    return templates.TemplateResponse(
        request,
        name,
        {
            "title": title,
            "app_name": settings.app_name,
            "retry_ms": settings.stream_retry_ms,
        },
    )


@router.get("/display", response_class=HTMLResponse)
async def display_page(request: Request) -> HTMLResponse:
    """Customer-facing mirror of the shared cart."""
    return _render(request, "display.html", "Your Order")


@router.get("/kitchen", response_class=HTMLResponse)
async def kitchen_page(request: Request) -> HTMLResponse:
    return _render(request, "kitchen.html", "Kitchen")


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(request: Request) -> HTMLResponse:
    return _render(request, "dashboard.html", "Dashboard")
