"""
SQLAlchemy Database Models

Menu catalog (categories, items, option groups and choices), orders with
their line items, staff accounts and the daily order-number sequence.

Version: 1.0.0
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from kiosk.database import Base


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    COOKING = "cooking"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = (OrderStatus.PENDING, OrderStatus.COOKING)
TERMINAL_STATUSES = (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.COOKING, OrderStatus.CANCELLED}),
    OrderStatus.COOKING: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


# =============================================================================
# MENU CATALOG
# =============================================================================

class Category(Base):
    """Menu section shown as a tab on the order screen."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self):
        return f"<Category #{self.id} - {self.name}>"


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    price = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(500), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    option_groups = relationship(
        "OptionGroup",
        order_by="OptionGroup.id",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} - {self.price}>"


class OptionGroup(Base):
    """
    A choice the customer makes for one menu item (size, spice level...).

    max_select caps how many choices of the group may be picked.
    """
    __tablename__ = "option_groups"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    is_required = Column(Boolean, nullable=False, default=False)
    max_select = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    choices = relationship(
        "OptionChoice",
        order_by="OptionChoice.id",
        lazy="selectin",
    )


class OptionChoice(Base):
    __tablename__ = "option_choices"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    option_group_id = Column(Integer, ForeignKey("option_groups.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    price_modifier = Column(Integer, nullable=False, default=0)
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)


# =============================================================================
# ORDERS
# =============================================================================

class Order(Base):
    """
    A submitted order.

    order_number is the short display number called out at the counter;
    it restarts at 1 every day, so id is the only stable identity.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_number = Column(Integer, nullable=False)
    status = Column(
        Enum(OrderStatus, values_callable=_enum_values, name="order_status"),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )
    total_price = Column(Integer, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.now)
    completed_at = Column(DateTime, nullable=True)

    items = relationship(
        "OrderItem",
        order_by="OrderItem.id",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Order #{self.id} (No. {self.order_number}) - {self.status.value}>"


class OrderItem(Base):
    """
    One line of an order.

    name and unit_price are snapshots taken at order time; menu_item_id
    is cleared if the menu item is later deleted.
    """
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=True)
    name = Column(String(100), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Integer, nullable=False)
    options_json = Column(Text, nullable=True)  # JSON list of selected options


class OrderSequence(Base):
    """Single-row table holding today's last issued order number."""
    __tablename__ = "order_sequence"

    id = Column(Integer, primary_key=True)
    current_number = Column(Integer, nullable=False, default=0)
    last_reset_date = Column(Date, nullable=True)


# =============================================================================
# ACCOUNTS
# =============================================================================

class Account(Base):
    """
    Login for the back office (is_admin) or a kiosk/kitchen device.

    Permission flags only matter for non-admin accounts.
    """
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(100), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)
    can_access_cooking = Column(Boolean, nullable=False, default=True)
    can_access_order = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now)

    def __repr__(self):
        role = "admin" if self.is_admin else "client"
        return f"<Account #{self.id} - {self.username} ({role})>"
