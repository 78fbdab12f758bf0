"""WebSocket stream of event bus notifications."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from samwise.events import ALL_EVENTS

logger = logging.getLogger(__name__)

router = APIRouter(tags=["events"])


@router.websocket("/events")
async def stream_events(websocket: WebSocket) -> None:
    """Forward every notification as ``{"event": name, "data": {...}}``."""
    core = websocket.app.state.core
    bus = core.event_bus
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    def _forwarder(name: str):
        def forward(**data: Any) -> None:
            # Emitted from the hotkey thread as well as the loop
            loop.call_soon_threadsafe(queue.put_nowait, {"event": name, "data": data})

        return forward

    handlers = {name: _forwarder(name) for name in ALL_EVENTS}
    for name, handler in handlers.items():
        bus.on(name, handler)

    await websocket.accept()
    logger.debug("Event stream client connected")
    try:
        while True:
            await websocket.send_json(await queue.get())
    except WebSocketDisconnect:
        logger.debug("Event stream client disconnected")
    finally:
        for name, handler in handlers.items():
            bus.off(name, handler)
