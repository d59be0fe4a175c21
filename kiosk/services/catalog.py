"""
Menu Catalog Service

Categories, menu items and their option groups/choices. All writes
commit before returning.
"""

import logging
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from kiosk.core.exceptions import NotFound, ValidationFailed
from kiosk.models import Category, MenuItem, OptionChoice, OptionGroup, OrderItem
from kiosk.schemas import (
    CategoryCreate,
    CategoryUpdate,
    MenuItemCreate,
    MenuItemUpdate,
    OptionChoiceCreate,
    OptionGroupCreate,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CATEGORIES
# =============================================================================

async def list_categories(db: AsyncSession) -> list[Category]:
    result = await db.execute(select(Category).order_by(Category.sort_order, Category.id))
    return list(result.scalars().all())


async def get_category(db: AsyncSession, category_id: int) -> Category:
    category = await db.get(Category, category_id)
    if category is None:
        raise NotFound(f"Category #{category_id} not found")
    return category


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    category = Category(name=data.name, sort_order=data.sort_order)
    db.add(category)
    await db.commit()
    await db.refresh(category)
    logger.info(f"Category #{category.id} '{category.name}' created")
    return category


async def update_category(db: AsyncSession, category_id: int, data: CategoryUpdate) -> Category:
    category = await get_category(db, category_id)
    category.name = data.name
    category.sort_order = data.sort_order
    await db.commit()
    return category


async def count_menu_items(db: AsyncSession, category_id: int) -> int:
    result = await db.execute(
        select(func.count(MenuItem.id)).where(MenuItem.category_id == category_id)
    )
    return result.scalar() or 0


async def delete_category(db: AsyncSession, category_id: int) -> None:
    """Delete an empty category. Categories still holding menu items are kept."""
    category = await get_category(db, category_id)

    menu_count = await count_menu_items(db, category_id)
    if menu_count > 0:
        raise ValidationFailed(
            f"Category '{category.name}' still has {menu_count} menu item(s). "
            f"Delete them or move them to another category first."
        )

    await db.delete(category)
    await db.commit()
    logger.info(f"Category #{category_id} deleted")


# =============================================================================
# MENU ITEMS
# =============================================================================

async def list_menu_items(db: AsyncSession, category_id: Optional[int] = None) -> list[MenuItem]:
    query = select(MenuItem)
    if category_id is not None:
        query = query.where(MenuItem.category_id == category_id).order_by(MenuItem.id)
    else:
        query = query.order_by(MenuItem.category_id, MenuItem.id)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_menu_item(db: AsyncSession, item_id: int) -> MenuItem:
    item = await db.get(MenuItem, item_id)
    if item is None:
        raise NotFound(f"Menu item #{item_id} not found")
    return item


async def create_menu_item(db: AsyncSession, data: MenuItemCreate) -> MenuItem:
    await get_category(db, data.category_id)

    item = MenuItem(**data.model_dump())
    db.add(item)
    await db.commit()
    await db.refresh(item)
    logger.info(f"Menu item #{item.id} '{item.name}' created ({item.price})")
    return item


async def update_menu_item(db: AsyncSession, item_id: int, data: MenuItemUpdate) -> MenuItem:
    item = await get_menu_item(db, item_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("category_id") is not None:
        await get_category(db, changes["category_id"])

    for key, value in changes.items():
        if value is None and key in ("category_id", "name", "price", "is_available"):
            continue
        setattr(item, key, value)

    await db.commit()
    return item


async def delete_menu_item(db: AsyncSession, item_id: int) -> None:
    """
    Remove a menu item together with its option groups and choices.

    Past orders keep their lines; only the link back to the menu is cleared.
    """
    await get_menu_item(db, item_id)

    group_ids = select(OptionGroup.id).where(OptionGroup.menu_item_id == item_id)
    await db.execute(
        update(OrderItem).where(OrderItem.menu_item_id == item_id).values(menu_item_id=None)
    )
    await db.execute(delete(OptionChoice).where(OptionChoice.option_group_id.in_(group_ids)))
    await db.execute(delete(OptionGroup).where(OptionGroup.menu_item_id == item_id))
    await db.execute(delete(MenuItem).where(MenuItem.id == item_id))
    await db.commit()
    db.expunge_all()
    logger.info(f"Menu item #{item_id} deleted")


# =============================================================================
# OPTIONS
# =============================================================================

async def list_option_groups(db: AsyncSession, menu_item_id: int) -> list[OptionGroup]:
    result = await db.execute(
        select(OptionGroup).where(OptionGroup.menu_item_id == menu_item_id).order_by(OptionGroup.id)
    )
    return list(result.scalars().all())


async def create_option_group(db: AsyncSession, data: OptionGroupCreate) -> OptionGroup:
    await get_menu_item(db, data.menu_item_id)

    group = OptionGroup(**data.model_dump())
    db.add(group)
    await db.commit()
    await db.refresh(group)
    return group


async def delete_option_group(db: AsyncSession, group_id: int) -> None:
    if await db.get(OptionGroup, group_id) is None:
        raise NotFound(f"Option group #{group_id} not found")

    await db.execute(delete(OptionChoice).where(OptionChoice.option_group_id == group_id))
    await db.execute(delete(OptionGroup).where(OptionGroup.id == group_id))
    await db.commit()
    db.expunge_all()


async def create_option_choice(db: AsyncSession, data: OptionChoiceCreate) -> OptionChoice:
    if await db.get(OptionGroup, data.option_group_id) is None:
        raise NotFound(f"Option group #{data.option_group_id} not found")

    choice = OptionChoice(**data.model_dump())
    db.add(choice)
    await db.commit()
    await db.refresh(choice)
    return choice


async def delete_option_choice(db: AsyncSession, choice_id: int) -> None:
    choice = await db.get(OptionChoice, choice_id)
    if choice is None:
        raise NotFound(f"Option choice #{choice_id} not found")

    await db.delete(choice)
    await db.commit()
