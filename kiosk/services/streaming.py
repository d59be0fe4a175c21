"""
Server-Sent Events Transport

Turns a LiveState channel into a long-lived text/event-stream response.

Per connection:
    1. send the initial message (with the client reconnect delay)
    2. subscribe; the callback only enqueues onto this connection's queue
    3. emit one frame per queued event, plus a heartbeat every
       heartbeat_interval seconds however busy the channel is
    4. unsubscribe as soon as the generator is closed or cancelled

Reconnecting is the client's job: the first frame carries an SSE
``retry`` field so EventSource waits stream_retry_ms before retrying.
"""

import asyncio
import json
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional

from fastapi.responses import StreamingResponse

from kiosk.services.live_state import StreamEvent, Subscriber, Unsubscribe

logger = logging.getLogger(__name__)

HEARTBEAT = StreamEvent("heartbeat")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: StreamEvent, retry_ms: Optional[int] = None) -> str:
    """Encode one event as an SSE frame."""
    payload = json.dumps(event.to_dict(), separators=(",", ":"), ensure_ascii=False)
    if retry_ms is not None:
        return f"retry: {retry_ms}\ndata: {payload}\n\n"
    return f"data: {payload}\n\n"


class EventStream:
    """
    One streaming connection bound to one broadcaster channel.

    Attributes:
        subscribe: Channel subscribe function (LiveState.subscribe_cart or
            LiveState.subscribe_orders)
        initial: First event sent on open
        heartbeat_interval: Seconds between heartbeats
        retry_ms: Reconnect delay advertised in the first frame
        is_disconnected: Optional coroutine polled between frames
    """

    def __init__(
        self,
        subscribe: Callable[[Subscriber], Unsubscribe],
        initial: StreamEvent,
        heartbeat_interval: float = 30.0,
        retry_ms: Optional[int] = 3000,
        is_disconnected: Optional[Callable[[], Awaitable[bool]]] = None,
    ):
        self.subscribe = subscribe
        self.initial = initial
        self.heartbeat_interval = heartbeat_interval
        self.retry_ms = retry_ms
        self.is_disconnected = is_disconnected

    async def frames(self) -> AsyncIterator[str]:
        queue: asyncio.Queue[StreamEvent] = asyncio.Queue()
        loop = asyncio.get_running_loop()

        yield format_sse(self.initial, retry_ms=self.retry_ms)

        unsubscribe = self.subscribe(queue.put_nowait)
        deadline = loop.time() + self.heartbeat_interval
        try:
            while True:
                if self.is_disconnected is not None and await self.is_disconnected():
                    logger.debug("Stream client disconnected")
                    break

                remaining = deadline - loop.time()
                if remaining <= 0:
                    # Fixed period, whether or not events went out meanwhile
                    deadline = loop.time() + self.heartbeat_interval
                    yield format_sse(HEARTBEAT)
                    continue

                try:
                    event = await asyncio.wait_for(queue.get(), timeout=remaining)
                except asyncio.TimeoutError:
                    continue
                yield format_sse(event)
        finally:
            unsubscribe()

    def response(self) -> StreamingResponse:
        return StreamingResponse(
            self.frames(),
            media_type="text/event-stream",
            headers=SSE_HEADERS,
        )
