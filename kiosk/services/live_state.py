"""
Live State Broadcaster

Holds the shared cart that the order screen edits and the customer
display mirrors, and relays cart and order changes to every open event
stream. Two independent channels:

    - cart:   current CartState, replayed once to each new subscriber
    - orders: order snapshots, delivered only to subscribers registered
              at the time of the change

One LiveState is created per application (see kiosk.main lifespan) and
handed to request handlers through kiosk.dependencies.get_live_state.

Delivery is synchronous and best effort. Every callback runs inside its
own error boundary: a callback that raises is logged and unsubscribed,
and the caller of update_cart / notify_* never sees the failure.
Callbacks must not block (the stream transport only enqueues).

Example:
    >>> state = LiveState()
    >>> seen = []
    >>> unsubscribe = state.subscribe_cart(seen.append)
    >>> state.update_cart([CartLine(menu_item_id=1, name="Tea", price=1000, quantity=2)])
    >>> seen[-1].data["totalPrice"]
    2000
    >>> unsubscribe()
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

CART_CHANNEL = "cart"
ORDERS_CHANNEL = "orders"


# =============================================================================
# EVENT ENVELOPE
# =============================================================================

@dataclass(frozen=True)
class StreamEvent:
    """
    Typed envelope for one stream message.

    Attributes:
        type: connected | cart_update | init | order_update | heartbeat
        data: JSON-ready payload, omitted from the wire when None
    """
    type: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        if self.data is None:
            return {"type": self.type}
        return {"type": self.type, "data": self.data}


Subscriber = Callable[[StreamEvent], None]
Unsubscribe = Callable[[], None]


# =============================================================================
# CART STATE
# =============================================================================

@dataclass(frozen=True)
class CartOption:
    group_name: str
    choice_name: str
    price_modifier: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "groupName": self.group_name,
            "choiceName": self.choice_name,
            "priceModifier": self.price_modifier,
        }


@dataclass(frozen=True)
class CartLine:
    """One line of the shared cart. total_price is always derived."""
    menu_item_id: int
    name: str
    price: int
    quantity: int
    options: tuple[CartOption, ...] = ()

    @property
    def unit_price(self) -> int:
        return self.price + sum(option.price_modifier for option in self.options)

    @property
    def total_price(self) -> int:
        return self.unit_price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "menuItemId": self.menu_item_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "options": [option.to_dict() for option in self.options],
            "totalPrice": self.total_price,
        }


@dataclass(frozen=True)
class CartState:
    """
    Immutable cart snapshot.

    Attributes:
        items: Cart lines in display order
        total_price: Sum of line totals
        last_updated: Milliseconds since the epoch
    """
    items: tuple[CartLine, ...] = ()
    total_price: int = 0
    last_updated: int = field(default_factory=lambda: _now_ms())

    @classmethod
    def from_lines(cls, lines: Iterable[CartLine]) -> "CartState":
        items = tuple(lines)
        return cls(
            items=items,
            total_price=sum(line.total_price for line in items),
            last_updated=_now_ms(),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [line.to_dict() for line in self.items],
            "totalPrice": self.total_price,
            "lastUpdated": self.last_updated,
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


# =============================================================================
# BROADCASTER
# =============================================================================

class LiveState:
    """
    Shared cart plus publish/subscribe for the cart and orders channels.

    Subscribers are kept in insertion order. Fan-out walks a copy of the
    subscriber list, so subscribing or unsubscribing from inside a
    callback only affects later broadcasts.
    """

    def __init__(self) -> None:
        self._cart = CartState()
        self._subscribers: dict[str, dict[int, Subscriber]] = {
            CART_CHANNEL: {},
            ORDERS_CHANNEL: {},
        }
        self._next_token = 0

    # -------------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------------

    def get_cart(self) -> CartState:
        return self._cart

    def update_cart(self, lines: Iterable[CartLine]) -> CartState:
        """
        Replace the whole cart and push it to every cart subscriber.

        Lines are taken as given; validation belongs to the caller.
        """
        self._cart = CartState.from_lines(lines)
        logger.debug(
            f"Cart updated: {len(self._cart.items)} line(s), total {self._cart.total_price}"
        )
        self._publish(CART_CHANNEL, self._cart_event())
        return self._cart

    def clear_cart(self) -> CartState:
        return self.update_cart([])

    def subscribe_cart(self, callback: Subscriber) -> Unsubscribe:
        """Register a cart subscriber and hand it the current cart right away."""
        token, unsubscribe = self._register(CART_CHANNEL, callback)
        self._deliver(CART_CHANNEL, token, callback, self._cart_event())
        return unsubscribe

    # -------------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------------

    def subscribe_orders(self, callback: Subscriber) -> Unsubscribe:
        """Register an order subscriber. Past events are not replayed."""
        _, unsubscribe = self._register(ORDERS_CHANNEL, callback)
        return unsubscribe

    def notify_new_order(self, order: dict[str, Any]) -> None:
        self._publish_order(order, "new order")

    def notify_order_update(self, order: dict[str, Any]) -> None:
        self._publish_order(order, f"status {order.get('status')}")

    def _publish_order(self, order: dict[str, Any], change: str) -> None:
        logger.debug(f"Broadcasting order #{order.get('id')} ({change})")
        self._publish(ORDERS_CHANNEL, StreamEvent("order_update", order))

    # -------------------------------------------------------------------------
    # Introspection
    # -------------------------------------------------------------------------

    def subscriber_count(self, channel: Optional[str] = None) -> int:
        if channel is not None:
            return len(self._subscribers[channel])
        return sum(len(subs) for subs in self._subscribers.values())

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _cart_event(self) -> StreamEvent:
        return StreamEvent("cart_update", self._cart.to_dict())

    def _register(self, channel: str, callback: Subscriber) -> tuple[int, Unsubscribe]:
        self._next_token += 1
        token = self._next_token
        self._subscribers[channel][token] = callback
        logger.debug(f"Subscriber {token} joined {channel} ({self.subscriber_count(channel)} active)")

        def unsubscribe() -> None:
            if self._subscribers[channel].pop(token, None) is not None:
                logger.debug(
                    f"Subscriber {token} left {channel} ({self.subscriber_count(channel)} active)"
                )

        return token, unsubscribe

    def _publish(self, channel: str, event: StreamEvent) -> None:
        for token, callback in list(self._subscribers[channel].items()):
            self._deliver(channel, token, callback, event)

    def _deliver(self, channel: str, token: int, callback: Subscriber, event: StreamEvent) -> None:
        try:
            callback(event)
        except Exception as e:
            # A failed delivery drops the subscriber; the broadcast goes on.
            logger.warning(f"Dropping {channel} subscriber {token} after failed delivery: {e}")
            self._subscribers[channel].pop(token, None)
