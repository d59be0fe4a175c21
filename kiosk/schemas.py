"""
Pydantic Schemas for Request/Response Validation

Catalog and account payloads use snake_case like the database rows.
Cart lines, order submissions and stats keep the camelCase wire format
the kiosk screens already speak (menuItemId, totalPrice, ...).

Version: 1.0.0
"""

import json
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from kiosk.models import OrderStatus


class CamelModel(BaseModel):
    """Accepts both field names and camelCase aliases; emits aliases."""
    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# AUTH
# =============================================================================

class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=128)


class SessionUser(BaseModel):
    username: str


class Permissions(BaseModel):
    can_access_cooking: bool
    can_access_order: bool


class VerifyResponse(BaseModel):
    authenticated: bool
    user: Optional[SessionUser] = None
    permissions: Optional[Permissions] = None


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


# =============================================================================
# CATALOG
# =============================================================================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Noodles"])
    sort_order: int = Field(default=0)


class CategoryUpdate(CategoryCreate):
    pass


class CategoryResponse(BaseModel):
    id: int
    name: str
    sort_order: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OptionChoiceCreate(BaseModel):
    option_group_id: int
    name: str = Field(..., min_length=1, max_length=100, examples=["Large"])
    price_modifier: int = Field(default=0, examples=[500])
    is_default: bool = False


class OptionChoiceResponse(BaseModel):
    id: int
    option_group_id: int
    name: str
    price_modifier: int
    is_default: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OptionGroupCreate(BaseModel):
    menu_item_id: int
    name: str = Field(..., min_length=1, max_length=100, examples=["Size"])
    is_required: bool = False
    max_select: int = Field(default=1, ge=1)


class OptionGroupResponse(BaseModel):
    id: int
    menu_item_id: int
    name: str
    is_required: bool
    max_select: int
    created_at: datetime
    choices: List[OptionChoiceResponse] = []

    model_config = ConfigDict(from_attributes=True)


class MenuItemCreate(BaseModel):
    category_id: int
    name: str = Field(..., min_length=1, max_length=100, examples=["Tteokbokki"])
    price: int = Field(..., gt=0, examples=[4000])
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=500)
    is_available: bool = True


class MenuItemUpdate(BaseModel):
    """Partial update: only fields present in the request are written."""
    category_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[int] = Field(None, gt=0)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[str] = Field(None, max_length=500)
    is_available: Optional[bool] = None


class MenuItemResponse(BaseModel):
    id: int
    category_id: int
    name: str
    price: int
    description: Optional[str]
    image_url: Optional[str]
    is_available: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MenuItemWithOptions(MenuItemResponse):
    option_groups: List[OptionGroupResponse] = Field(default=[], serialization_alias="optionGroups")


# =============================================================================
# CART
# =============================================================================

class SelectedOption(CamelModel):
    group_name: str = Field(..., alias="groupName", min_length=1)
    choice_name: str = Field(..., alias="choiceName", min_length=1)
    price_modifier: int = Field(default=0, alias="priceModifier")


class CartLineIn(CamelModel):
    """One cart line as sent by the order screen. totalPrice is derived."""
    menu_item_id: int = Field(..., alias="menuItemId")
    name: str = Field(..., min_length=1, max_length=100)
    price: int = Field(..., ge=0)
    quantity: int = Field(..., ge=1, le=99)
    options: List[SelectedOption] = []


class CartUpdate(BaseModel):
    items: List[CartLineIn]


# =============================================================================
# ORDERS
# =============================================================================

class OrderCreate(BaseModel):
    items: List[CartLineIn] = Field(..., min_length=1)


class OrderCreateResponse(CamelModel):
    success: bool = True
    order_id: int = Field(..., alias="orderId")
    order_number: int = Field(..., alias="orderNumber")
    total_price: int = Field(..., alias="totalPrice")


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class ClearOrdersRequest(BaseModel):
    password: str


class OrderItemResponse(BaseModel):
    id: int
    menu_item_id: Optional[int]
    name: str
    quantity: int
    unit_price: int
    options_json: Optional[str] = Field(default=None, exclude=True)

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def options(self) -> List[dict[str, Any]]:
        return json.loads(self.options_json) if self.options_json else []


class OrderResponse(BaseModel):
    """Order snapshot; also the payload of order_update stream events."""
    id: int
    order_number: int
    status: OrderStatus
    total_price: int
    created_at: datetime
    updated_at: Optional[datetime]
    completed_at: Optional[datetime]
    items: List[OrderItemResponse] = []

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# ACCOUNTS
# =============================================================================

class AccountCreate(BaseModel):
    username: str = Field(..., min_length=2, max_length=50)
    password: str = Field(..., min_length=4, max_length=128)
    can_access_cooking: bool = True
    can_access_order: bool = True


class PermissionsUpdate(BaseModel):
    can_access_cooking: bool = True
    can_access_order: bool = True


class AccountResponse(BaseModel):
    id: int
    username: str
    can_access_cooking: bool
    can_access_order: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountCreateResponse(BaseModel):
    success: bool = True
    id: int


# =============================================================================
# STATS
# =============================================================================

class TodayStats(CamelModel):
    total_orders: int = Field(..., alias="totalOrders")
    total_revenue: int = Field(..., alias="totalRevenue")
    completed_orders: int = Field(..., alias="completedOrders")


class MenuRankingEntry(CamelModel):
    name: str
    total_quantity: int = Field(..., alias="totalQuantity")
    total_revenue: int = Field(..., alias="totalRevenue")


class StatsResponse(CamelModel):
    today: TodayStats
    menu_ranking: List[MenuRankingEntry] = Field(..., alias="menuRanking")


class ExportResponse(BaseModel):
    success: bool
    task_id: Optional[str] = None
    orders: int


# =============================================================================
# OPERATIONAL
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    redis: str
    cart_subscribers: int
    order_subscribers: int
    timestamp: datetime
