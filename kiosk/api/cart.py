"""
Shared Cart Endpoints

The order screen writes the cart; the customer display only reads it
(GET here, live updates through /api/sse/cart).
"""

from fastapi import APIRouter, Depends

from kiosk.dependencies import get_live_state, require_order_access
from kiosk.schemas import CartLineIn, CartUpdate
from kiosk.services.live_state import CartLine, CartOption, LiveState

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def to_cart_line(line: CartLineIn) -> CartLine:
    return CartLine(
        menu_item_id=line.menu_item_id,
        name=line.name,
        price=line.price,
        quantity=line.quantity,
        options=tuple(
            CartOption(
                group_name=option.group_name,
                choice_name=option.choice_name,
                price_modifier=option.price_modifier,
            )
            for option in line.options
        ),
    )


@router.get("")
async def get_cart(live_state: LiveState = Depends(get_live_state)) -> dict:
    return live_state.get_cart().to_dict()


@router.post("", dependencies=[Depends(require_order_access)])
async def update_cart(
    data: CartUpdate,
    live_state: LiveState = Depends(get_live_state),
) -> dict:
    """Replace the whole cart; every cart stream receives the new state."""
    cart = live_state.update_cart([to_cart_line(line) for line in data.items])
    return cart.to_dict()


@router.delete("", dependencies=[Depends(require_order_access)])
async def clear_cart(live_state: LiveState = Depends(get_live_state)) -> dict:
    return live_state.clear_cart().to_dict()
