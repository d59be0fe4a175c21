"""
Service layer: store access, the live-state broadcaster and the SSE
transport. Routers in kiosk.api call into these modules.
"""

from kiosk.services.live_state import CartLine, CartOption, CartState, LiveState, StreamEvent
from kiosk.services.streaming import EventStream, format_sse

__all__ = [
    "CartLine",
    "CartOption",
    "CartState",
    "EventStream",
    "LiveState",
    "StreamEvent",
    "format_sse",
]
