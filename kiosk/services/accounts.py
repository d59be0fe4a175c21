"""
Account Service

Login checks, the two bootstrap accounts and admin-side management of
staff (client) accounts and their permission flags.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.core.config import get_settings
from kiosk.core.exceptions import Conflict, NotFound, PermissionDenied
from kiosk.core.security import hash_password, verify_password
from kiosk.models import Account
from kiosk.schemas import AccountCreate, PermissionsUpdate

logger = logging.getLogger(__name__)


async def get_account_by_username(db: AsyncSession, username: str) -> Optional[Account]:
    result = await db.execute(select(Account).where(Account.username == username))
    return result.scalar_one_or_none()


async def get_account(db: AsyncSession, account_id: int) -> Account:
    account = await db.get(Account, account_id)
    if account is None:
        raise NotFound(f"User #{account_id} not found")
    return account


async def _upsert_bootstrap_account(
    db: AsyncSession,
    username: str,
    password: str,
    is_admin: bool,
) -> None:
    account = await get_account_by_username(db, username)
    if account is None:
        db.add(Account(
            username=username,
            password_hash=hash_password(password),
            is_admin=is_admin,
            can_access_cooking=True,
            can_access_order=True,
        ))
        logger.info(f"Created {'admin' if is_admin else 'default'} account '{username}'")
    else:
        account.password_hash = hash_password(password)
        account.is_admin = is_admin


async def ensure_bootstrap_accounts(db: AsyncSession) -> None:
    """
    Make sure the admin and default staff accounts exist.

    Their passwords are re-applied from settings on every start, so a
    forgotten password is fixed by restarting the server.
    """
    settings = get_settings()
    await _upsert_bootstrap_account(db, settings.admin_username, settings.admin_password, True)
    await _upsert_bootstrap_account(
        db, settings.default_user_username, settings.default_user_password, False
    )
    await db.commit()


async def authenticate(db: AsyncSession, username: str, password: str) -> Optional[Account]:
    """Return the account if the password matches, None otherwise."""
    account = await get_account_by_username(db, username)
    if account is None or not verify_password(password, account.password_hash):
        logger.info(f"Failed login for '{username}'")
        return None
    return account


# =============================================================================
# CLIENT ACCOUNT MANAGEMENT
# =============================================================================

async def list_client_accounts(db: AsyncSession) -> list[Account]:
    result = await db.execute(
        select(Account).where(Account.is_admin.is_(False)).order_by(Account.created_at.desc(), Account.id.desc())
    )
    return list(result.scalars().all())


async def create_client_account(db: AsyncSession, data: AccountCreate) -> Account:
    if await get_account_by_username(db, data.username) is not None:
        raise Conflict(f"Username '{data.username}' is already taken")

    account = Account(
        username=data.username,
        password_hash=hash_password(data.password),
        is_admin=False,
        can_access_cooking=data.can_access_cooking,
        can_access_order=data.can_access_order,
    )
    db.add(account)
    await db.commit()
    await db.refresh(account)
    logger.info(f"Account #{account.id} '{account.username}' created")
    return account


async def update_permissions(db: AsyncSession, account_id: int, data: PermissionsUpdate) -> Account:
    account = await get_account(db, account_id)
    if account.is_admin:
        raise PermissionDenied("The admin account cannot be modified")

    account.can_access_cooking = data.can_access_cooking
    account.can_access_order = data.can_access_order
    await db.commit()
    logger.info(
        f"Account #{account_id} permissions: cooking={data.can_access_cooking}, order={data.can_access_order}"
    )
    return account


async def delete_client_account(db: AsyncSession, account_id: int) -> None:
    account = await get_account(db, account_id)
    if account.is_admin:
        raise PermissionDenied("The admin account cannot be deleted")

    await db.delete(account)
    await db.commit()
    logger.info(f"Account #{account_id} deleted")
