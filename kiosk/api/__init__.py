"""HTTP routers, mounted by kiosk.main."""

from kiosk.api import auth, cart, catalog, orders, pages, stats, streams, users

all_routers = [
    auth.router,
    catalog.router,
    cart.router,
    orders.router,
    users.router,
    stats.router,
    streams.router,
    pages.router,
]

__all__ = ["all_routers"]
