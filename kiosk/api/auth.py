"""
Authentication Endpoints

Back-office login issues admin_token; kiosk/kitchen device login issues
user_token. Both are HttpOnly cookies, so browsers send them on every
request including EventSource connections.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.core.exceptions import AuthenticationRequired
from kiosk.core.security import (
    ADMIN_COOKIE_NAME,
    CLIENT_COOKIE_NAME,
    SessionClaims,
    get_admin_signer,
    get_client_signer,
)
from kiosk.database import get_db
from kiosk.dependencies import (
    ClientAccess,
    clear_session_cookies,
    get_admin_session,
    get_client_access,
    set_session_cookie,
)
from kiosk.schemas import (
    ErrorResponse,
    LoginRequest,
    Permissions,
    SessionUser,
    SuccessResponse,
    VerifyResponse,
)
from kiosk.services import accounts

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/login",
    response_model=SuccessResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Admin Login",
)
async def admin_login(
    credentials: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    account = await accounts.authenticate(db, credentials.username, credentials.password)
    if account is None or not account.is_admin:
        raise AuthenticationRequired("Invalid username or password")

    signer = get_admin_signer()
    set_session_cookie(response, ADMIN_COOKIE_NAME, signer.issue(account.id, account.username), signer.max_age)
    logger.info(f"Admin '{account.username}' logged in")
    return SuccessResponse()


@router.post(
    "/client-login",
    response_model=SuccessResponse,
    responses={401: {"model": ErrorResponse}},
    summary="Kiosk / Kitchen Login",
)
async def client_login(
    credentials: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
) -> SuccessResponse:
    account = await accounts.authenticate(db, credentials.username, credentials.password)
    if account is None:
        raise AuthenticationRequired("Invalid username or password")

    signer = get_client_signer()
    set_session_cookie(response, CLIENT_COOKIE_NAME, signer.issue(account.id, account.username), signer.max_age)
    logger.info(f"Client '{account.username}' logged in")
    return SuccessResponse()


@router.post("/logout", response_model=SuccessResponse, summary="Logout")
async def logout(response: Response) -> SuccessResponse:
    """Drop both session cookies."""
    clear_session_cookies(response)
    return SuccessResponse()


@router.get(
    "/verify-admin",
    response_model=VerifyResponse,
    response_model_exclude_none=True,
    responses={401: {"model": ErrorResponse}},
)
async def verify_admin(
    claims: Optional[SessionClaims] = Depends(get_admin_session),
) -> VerifyResponse:
    if claims is None:
        raise AuthenticationRequired("Not logged in as admin")
    return VerifyResponse(authenticated=True, user=SessionUser(username=claims.username))


@router.get(
    "/verify-client",
    response_model=VerifyResponse,
    responses={401: {"model": ErrorResponse}},
)
async def verify_client(
    access: Optional[ClientAccess] = Depends(get_client_access),
) -> VerifyResponse:
    if access is None:
        raise AuthenticationRequired("Not logged in")
    return VerifyResponse(
        authenticated=True,
        user=SessionUser(username=access.claims.username),
        permissions=Permissions(
            can_access_cooking=access.can_access_cooking,
            can_access_order=access.can_access_order,
        ),
    )
