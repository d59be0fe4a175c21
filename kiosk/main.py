"""
FastAPI Application Entry Point

Event Kiosk POS: order screen, kitchen screen, customer display and
admin back office sharing one live cart and one order queue.

Endpoints:
    - /api/auth/*: Admin and kiosk/kitchen sessions
    - /api/categories, /api/menu, /api/options: Menu catalog
    - /api/cart: Shared cart
    - /api/orders: Order submission and lifecycle
    - /api/users: Staff accounts (admin)
    - /api/stats: Sales statistics and spreadsheet export (admin)
    - /api/sse/cart, /api/sse/orders: Live event streams
    - /display, /kitchen, /dashboard: HTML screens
    - /health: System health check

Version: 1.0.0
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime

import redis.asyncio as redis
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

# Windows-specific event loop policy
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from kiosk.api import all_routers
from kiosk.core.config import get_settings, setup_logging
from kiosk.core.exceptions import KioskError
from kiosk.database import async_session_maker, engine, get_db, init_db
from kiosk.schemas import ErrorResponse, HealthResponse
from kiosk.services.accounts import ensure_bootstrap_accounts
from kiosk.services.live_state import CART_CHANNEL, ORDERS_CHANNEL, LiveState
from kiosk.services.orders import ensure_order_sequence

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    async with async_session_maker() as db:
        await ensure_bootstrap_accounts(db)
        await ensure_order_sequence(db)
    logger.info("✅ Database initialized")

    app.state.live_state = LiveState()
    logger.info("✅ Live state ready (cart + orders channels)")

    insecure = settings.validate_production_config()
    if insecure:
        logger.warning(f"⚠️ Insecure defaults still in use: {insecure}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Point-of-sale kiosk for pop-up food stalls: menu management, "
        "order queue and live cart/order streams."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for router in all_routers:
    app.include_router(router)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍢 Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "display": "/display",
        "kitchen": "/kitchen",
        "dashboard": "/dashboard",
        "health": "/health",
    }


async def _check_redis() -> str:
    client = redis.from_url(settings.redis_url, socket_timeout=2, socket_connect_timeout=2)
    try:
        await client.ping()
        return "healthy"
    except Exception as e:
        logger.error(f"Redis health check failed: {e}")
        return f"unhealthy: {e}"
    finally:
        await client.aclose()


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> HealthResponse:
    """Verify the database and the export broker, and count open streams."""
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = f"unhealthy: {e}"
        logger.error(f"Database health check failed: {e}")

    redis_status = await _check_redis()

    live_state: LiveState = request.app.state.live_state
    overall = "operational" if db_status == redis_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        redis=redis_status,
        cart_subscribers=live_state.subscriber_count(CART_CHANNEL),
        order_subscribers=live_state.subscriber_count(ORDERS_CHANNEL),
        timestamp=datetime.now(),
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(KioskError)
async def kiosk_error_handler(request: Request, exc: KioskError) -> JSONResponse:
    """Render service-layer errors with their own status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.error, detail=exc.message).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            detail=str(exc) if settings.debug else "An unexpected error occurred",
        ).model_dump(),
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "kiosk.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
