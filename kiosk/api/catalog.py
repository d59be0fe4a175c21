"""
Menu Catalog Endpoints

Reads are public (the order screen loads the menu before anyone logs
in); every write needs an admin session.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.database import get_db
from kiosk.dependencies import require_admin
from kiosk.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    ErrorResponse,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    MenuItemWithOptions,
    OptionChoiceCreate,
    OptionChoiceResponse,
    OptionGroupCreate,
    OptionGroupResponse,
    SuccessResponse,
)
from kiosk.services import catalog

router = APIRouter(prefix="/api", tags=["Catalog"])

admin_only = [Depends(require_admin)]


# =============================================================================
# CATEGORIES
# =============================================================================

@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(db: AsyncSession = Depends(get_db)):
    return await catalog.list_categories(db)


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=201,
    dependencies=admin_only,
)
async def create_category(data: CategoryCreate, db: AsyncSession = Depends(get_db)):
    return await catalog.create_category(db, data)


@router.put(
    "/categories/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}},
    dependencies=admin_only,
)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await catalog.update_category(db, category_id, data)


@router.delete(
    "/categories/{category_id}",
    response_model=SuccessResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    dependencies=admin_only,
)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db)):
    await catalog.delete_category(db, category_id)
    return SuccessResponse()


# =============================================================================
# MENU ITEMS
# =============================================================================

@router.get("/menu", responses={200: {"model": list[MenuItemWithOptions]}})
async def list_menu_items(
    category_id: Optional[int] = Query(None),
    with_options: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """Menu items, optionally filtered by category and expanded with options."""
    items = await catalog.list_menu_items(db, category_id)
    schema = MenuItemWithOptions if with_options else MenuItemResponse
    return [schema.model_validate(item) for item in items]


@router.get(
    "/menu/{item_id}",
    responses={200: {"model": MenuItemWithOptions}, 404: {"model": ErrorResponse}},
)
async def get_menu_item(
    item_id: int,
    with_options: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    item = await catalog.get_menu_item(db, item_id)
    schema = MenuItemWithOptions if with_options else MenuItemResponse
    return schema.model_validate(item)


@router.post(
    "/menu",
    response_model=MenuItemResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
    dependencies=admin_only,
)
async def create_menu_item(data: MenuItemCreate, db: AsyncSession = Depends(get_db)):
    return await catalog.create_menu_item(db, data)


@router.put(
    "/menu/{item_id}",
    response_model=MenuItemResponse,
    responses={404: {"model": ErrorResponse}},
    dependencies=admin_only,
)
async def update_menu_item(
    item_id: int,
    data: MenuItemUpdate,
    db: AsyncSession = Depends(get_db),
):
    return await catalog.update_menu_item(db, item_id, data)


@router.delete(
    "/menu/{item_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
    dependencies=admin_only,
)
async def delete_menu_item(item_id: int, db: AsyncSession = Depends(get_db)):
    await catalog.delete_menu_item(db, item_id)
    return SuccessResponse()


# =============================================================================
# OPTIONS
# =============================================================================

@router.get("/options", response_model=list[OptionGroupResponse])
async def list_options(menu_item_id: int = Query(...), db: AsyncSession = Depends(get_db)):
    return await catalog.list_option_groups(db, menu_item_id)


@router.post(
    "/options/groups",
    response_model=OptionGroupResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
    dependencies=admin_only,
)
async def create_option_group(data: OptionGroupCreate, db: AsyncSession = Depends(get_db)):
    return await catalog.create_option_group(db, data)


@router.post(
    "/options/choices",
    response_model=OptionChoiceResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
    dependencies=admin_only,
)
async def create_option_choice(data: OptionChoiceCreate, db: AsyncSession = Depends(get_db)):
    return await catalog.create_option_choice(db, data)


@router.delete(
    "/options/groups/{group_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
    dependencies=admin_only,
)
async def delete_option_group(group_id: int, db: AsyncSession = Depends(get_db)):
    await catalog.delete_option_group(db, group_id)
    return SuccessResponse()


@router.delete(
    "/options/choices/{choice_id}",
    response_model=SuccessResponse,
    responses={404: {"model": ErrorResponse}},
    dependencies=admin_only,
)
async def delete_option_choice(choice_id: int, db: AsyncSession = Depends(get_db)):
    await catalog.delete_option_choice(db, choice_id)
    return SuccessResponse()
