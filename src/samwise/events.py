"""Internal event bus carrying notifications toward the UI."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

SyncHandler = Callable[..., None]
AsyncHandler = Callable[..., Coroutine[Any, Any, None]]
Handler = SyncHandler | AsyncHandler

# Event names emitted by the core
HOTKEY_TRIGGERED = "hotkey.triggered"
WINDOW_SHOWN = "window.shown"
WINDOW_HIDDEN = "window.hidden"
APP_QUIT = "app.quit"
MODEL_SELECTED = "model.selected"
SETTINGS_REQUESTED = "settings.requested"
LLM_STARTED = "llm.started"
LLM_COMPLETE = "llm.complete"
LLM_FAILED = "llm.failed"

ALL_EVENTS = (
    HOTKEY_TRIGGERED,
    WINDOW_SHOWN,
    WINDOW_HIDDEN,
    APP_QUIT,
    MODEL_SELECTED,
    SETTINGS_REQUESTED,
    LLM_STARTED,
    LLM_COMPLETE,
    LLM_FAILED,
)


class EventBus:
    """Publish/subscribe bus supporting both sync and async handlers.

    Notifications are fire-and-forget: a failing handler is logged and never
    propagates into the emitter. ``emit`` may be called from the hotkey
    thread; async handlers are then scheduled onto the loop thread-safely.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._lock = threading.Lock()

    def set_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Set the asyncio event loop for scheduling async handlers."""
        self._loop = loop

    def on(self, event: str, handler: Handler) -> None:
        """Subscribe a handler to an event."""
        with self._lock:
            self._handlers[event].append(handler)
        logger.debug("Registered handler %s for event '%s'", getattr(handler, "__name__", handler), event)

    def off(self, event: str, handler: Handler) -> None:
        """Unsubscribe a handler from an event."""
        with self._lock:
            try:
                self._handlers[event].remove(handler)
            except ValueError:
                pass

    def emit(self, event: str, **kwargs: Any) -> None:
        """Emit an event, calling all registered handlers."""
        with self._lock:
            handlers = list(self._handlers.get(event, []))
        if not handlers:
            return

        logger.debug("Emitting event '%s' to %d handler(s)", event, len(handlers))
        for handler in handlers:
            try:
                if asyncio.iscoroutinefunction(handler):
                    self._schedule(handler, kwargs)
                else:
                    handler(**kwargs)
            except Exception:
                logger.exception(
                    "Error in handler %s for event '%s'", getattr(handler, "__name__", handler), event
                )

    def _schedule(self, handler: AsyncHandler, kwargs: dict[str, Any]) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.warning(
                "Cannot schedule async handler %s: no event loop",
                getattr(handler, "__name__", handler),
            )
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            loop.create_task(handler(**kwargs))
        else:
            asyncio.run_coroutine_threadsafe(handler(**kwargs), loop)

    def clear(self) -> None:
        """Remove all handlers."""
        with self._lock:
            self._handlers.clear()


# Global event bus singleton
event_bus = EventBus()
