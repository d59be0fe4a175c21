from __future__ import annotations

from kiosk.services.live_state import (
    CART_CHANNEL,
    ORDERS_CHANNEL,
    CartLine,
    CartOption,
    LiveState,
    StreamEvent,
)


def _tea(quantity: int = 2) -> CartLine:
    return CartLine(menu_item_id=1, name="Tea", price=1000, quantity=quantity)


def test_cart_total_includes_option_deltas():
    state = LiveState()
    line = CartLine(
        menu_item_id=2,
        name="Tteokbokki",
        price=4000,
        quantity=2,
        options=(
            CartOption("Spice", "Extra hot", 500),
            CartOption("Topping", "Cheese", 1000),
        ),
    )

    cart = state.update_cart([line, _tea(1)])

    assert line.total_price == (4000 + 500 + 1000) * 2
    assert cart.total_price == 11000 + 1000
    assert cart.to_dict()["items"][0]["options"][0] == {
        "groupName": "Spice",
        "choiceName": "Extra hot",
        "priceModifier": 500,
    }


def test_subscribe_cart_delivers_snapshot_first():
    state = LiveState()
    state.update_cart([_tea()])
    seen: list[StreamEvent] = []

    state.subscribe_cart(seen.append)
    assert len(seen) == 1
    assert seen[0].type == "cart_update"
    assert seen[0].data["totalPrice"] == 2000

    state.update_cart([_tea(3)])
    assert [e.data["totalPrice"] for e in seen] == [2000, 3000]


def test_clear_cart_empties_lines_and_total():
    state = LiveState()
    state.update_cart([_tea()])

    state.clear_cart()

    cart = state.get_cart()
    assert cart.items == ()
    assert cart.total_price == 0


def test_last_updated_is_milliseconds():
    state = LiveState()
    cart = state.update_cart([_tea()])
    # ms since epoch is a 13 digit number for the foreseeable future
    assert len(str(cart.last_updated)) == 13


def test_order_notifications_without_subscribers():
    state = LiveState()
    state.notify_new_order({"id": 1, "status": "pending"})
    state.notify_order_update({"id": 1, "status": "cooking"})
    assert state.subscriber_count() == 0


def test_subscribe_orders_has_no_replay():
    state = LiveState()
    state.notify_new_order({"id": 1, "status": "pending"})
    seen: list[StreamEvent] = []

    state.subscribe_orders(seen.append)
    assert seen == []

    state.notify_order_update({"id": 1, "status": "cooking"})
    assert seen == [StreamEvent("order_update", {"id": 1, "status": "cooking"})]


def test_two_subscribers_then_one_leaves():
    state = LiveState()
    s1: list[StreamEvent] = []
    s2: list[StreamEvent] = []
    unsubscribe_1 = state.subscribe_cart(s1.append)
    state.subscribe_cart(s2.append)

    state.update_cart([_tea(2)])
    for seen in (s1, s2):
        data = seen[-1].data
        assert set(data) == {"items", "totalPrice", "lastUpdated"}
        assert data["totalPrice"] == 2000

    unsubscribe_1()
    state.clear_cart()

    assert s1[-1].data["totalPrice"] == 2000
    assert s2[-1].data["items"] == []
    assert s2[-1].data["totalPrice"] == 0


def test_unsubscribe_during_fan_out_keeps_others():
    state = LiveState()
    seen_a: list[StreamEvent] = []
    seen_c: list[StreamEvent] = []
    handles = {}

    def b(event: StreamEvent) -> None:
        handles["b"]()
        handles["a"]()

    handles["a"] = state.subscribe_orders(seen_a.append)
    handles["b"] = state.subscribe_orders(b)
    state.subscribe_orders(seen_c.append)

    state.notify_new_order({"id": 7})

    assert len(seen_a) == 1
    assert len(seen_c) == 1
    assert state.subscriber_count(ORDERS_CHANNEL) == 1


def test_failing_subscriber_is_dropped():
    state = LiveState()
    seen: list[StreamEvent] = []
    calls = []

    def broken(event: StreamEvent) -> None:
        calls.append(event)
        raise RuntimeError("socket closed")

    state.subscribe_orders(broken)
    state.subscribe_orders(seen.append)

    state.notify_new_order({"id": 1})
    state.notify_new_order({"id": 2})

    assert len(calls) == 1
    assert [e.data["id"] for e in seen] == [1, 2]
    assert state.subscriber_count(ORDERS_CHANNEL) == 1


def test_failing_cart_subscriber_on_initial_snapshot():
    state = LiveState()

    def broken(event: StreamEvent) -> None:
        raise ValueError("boom")

    state.subscribe_cart(broken)

    assert state.subscriber_count(CART_CHANNEL) == 0
    state.update_cart([_tea()])


def test_unsubscribe_is_idempotent():
    state = LiveState()
    unsubscribe = state.subscribe_cart(lambda event: None)
    state.subscribe_cart(lambda event: None)

    unsubscribe()
    unsubscribe()

    assert state.subscriber_count(CART_CHANNEL) == 1


def test_stream_event_omits_missing_data():
    assert StreamEvent("heartbeat").to_dict() == {"type": "heartbeat"}
    assert StreamEvent("init", []).to_dict() == {"type": "init", "data": []}


def test_new_and_changed_orders_share_one_envelope():
    state = LiveState()
    seen: list[StreamEvent] = []
    state.subscribe_orders(seen.append)

    state.notify_new_order({"id": 3, "status": "pending"})
    state.notify_order_update({"id": 3, "status": "cooking"})

    assert [e.type for e in seen] == ["order_update", "order_update"]
    assert [e.data["status"] for e in seen] == ["pending", "cooking"]
