"""
FastAPI Dependencies

Live-state access and the session checks used by the routers:

    require_admin          admin_token cookie, admin account
    require_client         user_token cookie (or an admin session)
    require_order_access   client session allowed to edit the cart/place orders
    require_cooking_access client session allowed to move orders in the kitchen
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Cookie, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.core.config import get_settings
from kiosk.core.exceptions import AuthenticationRequired, PermissionDenied
from kiosk.core.security import (
    ADMIN_COOKIE_NAME,
    CLIENT_COOKIE_NAME,
    SessionClaims,
    get_admin_signer,
    get_client_signer,
)
from kiosk.database import get_db
from kiosk.models import Account
from kiosk.services.live_state import LiveState

logger = logging.getLogger(__name__)


def get_live_state(request: Request) -> LiveState:
    return request.app.state.live_state


# =============================================================================
# COOKIES
# =============================================================================

def set_session_cookie(response: Response, name: str, token: str, max_age: int) -> None:
    response.set_cookie(
        key=name,
        value=token,
        max_age=max_age,
        httponly=True,
        samesite="lax",
        secure=get_settings().cookie_secure,
        path="/",
    )


def clear_session_cookies(response: Response) -> None:
    for name in (ADMIN_COOKIE_NAME, CLIENT_COOKIE_NAME):
        response.delete_cookie(key=name, path="/")


# =============================================================================
# ADMIN SESSION
# =============================================================================

def get_admin_session(
    admin_token: Optional[str] = Cookie(None, alias=ADMIN_COOKIE_NAME),
) -> Optional[SessionClaims]:
    return get_admin_signer().verify(admin_token)


def require_admin(
    claims: Optional[SessionClaims] = Depends(get_admin_session),
) -> SessionClaims:
    if claims is None:
        raise AuthenticationRequired("Admin login required")
    return claims


# =============================================================================
# CLIENT SESSION
# =============================================================================

@dataclass
class ClientAccess:
    """A verified client (or admin) session with its current permissions."""
    claims: SessionClaims
    can_access_cooking: bool
    can_access_order: bool


async def get_client_access(
    user_token: Optional[str] = Cookie(None, alias=CLIENT_COOKIE_NAME),
    admin: Optional[SessionClaims] = Depends(get_admin_session),
    db: AsyncSession = Depends(get_db),
) -> Optional[ClientAccess]:
    """
    Resolve the caller's client session.

    Permissions are read from the account on every request, so an admin
    revoking a flag takes effect without a new login. Tokens of deleted
    accounts stop working.
    """
    if admin is not None:
        return ClientAccess(claims=admin, can_access_cooking=True, can_access_order=True)

    claims = get_client_signer().verify(user_token)
    if claims is None:
        return None

    account = await db.get(Account, claims.user_id)
    if account is None:
        logger.info(f"Session for deleted account #{claims.user_id} rejected")
        return None

    if account.is_admin:
        return ClientAccess(claims=claims, can_access_cooking=True, can_access_order=True)

    return ClientAccess(
        claims=claims,
        can_access_cooking=account.can_access_cooking,
        can_access_order=account.can_access_order,
    )


def require_client(
    access: Optional[ClientAccess] = Depends(get_client_access),
) -> ClientAccess:
    if access is None:
        raise AuthenticationRequired("Login required")
    return access


def require_order_access(access: ClientAccess = Depends(require_client)) -> ClientAccess:
    if not access.can_access_order:
        raise PermissionDenied("No permission for the order screen")
    return access


def require_cooking_access(access: ClientAccess = Depends(require_client)) -> ClientAccess:
    if not access.can_access_cooking:
        raise PermissionDenied("No permission for the kitchen screen")
    return access
