"""
Staff Account Endpoints (admin only)
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.database import get_db
from kiosk.dependencies import require_admin
from kiosk.schemas import (
    AccountCreate,
    AccountCreateResponse,
    AccountResponse,
    ErrorResponse,
    PermissionsUpdate,
    SuccessResponse,
)
from kiosk.services import accounts

router = APIRouter(
    prefix="/api/users",
    tags=["Users"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=list[AccountResponse])
async def list_users(db: AsyncSession = Depends(get_db)):
    """Client accounts, newest first. The admin account is never listed."""
    return await accounts.list_client_accounts(db)


@router.post(
    "",
    response_model=AccountCreateResponse,
    status_code=201,
    responses={409: {"model": ErrorResponse}},
)
async def create_user(data: AccountCreate, db: AsyncSession = Depends(get_db)):
    account = await accounts.create_client_account(db, data)
    return AccountCreateResponse(id=account.id)


@router.put(
    "/{account_id}",
    response_model=AccountResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_user_permissions(
    account_id: int,
    data: PermissionsUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await accounts.update_permissions(db, account_id, data)


@router.delete(
    "/{account_id}",
    response_model=SuccessResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_user(account_id: int, db: AsyncSession = Depends(get_db)):
    await accounts.delete_client_account(db, account_id)
    return SuccessResponse()
