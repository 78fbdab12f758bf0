"""Hotkey/window activation state machine.

The controller owns the single global binding and the window visibility
state. The UI never toggles visibility on its own; it reacts to the events
emitted here and calls ``show``/``hide``/``close_requested``/``quit``.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum, auto
from typing import TYPE_CHECKING

from samwise.constants import HOTKEY_DEBOUNCE
from samwise.events import APP_QUIT, HOTKEY_TRIGGERED, WINDOW_HIDDEN, WINDOW_SHOWN
from samwise.input.hotkey import HotkeyRegistrationError, normalize_hotkey

if TYPE_CHECKING:
    from samwise.events import EventBus
    from samwise.input.hotkey import HotkeyBackend
    from samwise.output.clipboard import Clipboard

logger = logging.getLogger(__name__)


class WindowState(Enum):
    """Window activation states."""

    HIDDEN = auto()
    VISIBLE = auto()
    QUIT = auto()


class WindowController:
    """Global hotkey registration plus the Hidden/Visible/Quit state machine."""

    def __init__(
        self,
        event_bus: EventBus,
        hotkeys: HotkeyBackend,
        clipboard: Clipboard | None = None,
        debounce: float = HOTKEY_DEBOUNCE,
    ) -> None:
        self._event_bus = event_bus
        self._hotkeys = hotkeys
        self._clipboard = clipboard
        self._debounce = debounce
        self._state = WindowState.HIDDEN
        self._hotkey: str | None = None
        self._last_trigger = float("-inf")
        self._lock = threading.RLock()
        # Serializes binding changes; never held by the hotkey callback
        self._binding_lock = threading.Lock()

    @property
    def state(self) -> WindowState:
        return self._state

    @property
    def visible(self) -> bool:
        return self._state is WindowState.VISIBLE

    @property
    def hotkey(self) -> str | None:
        """The hotkey currently bound, or None before ``start``."""
        return self._hotkey

    def start(self, hotkey: str) -> None:
        """Start the backend and register the initial binding.

        Raises:
            HotkeyRegistrationError: If the binding could not be registered.
        """
        self._hotkeys.start()
        with self._binding_lock:
            self._hotkeys.register(hotkey, self.on_hotkey)
            with self._lock:
                self._hotkey = hotkey
        logger.info("Global hotkey registered: %s", hotkey)

    def update_hotkey(self, new_hotkey: str) -> None:
        """Replace the binding as one logical operation.

        The new binding is registered before the old one is released; if
        registration fails the old binding is left untouched. Backend calls
        run without the state lock so a press during the swap is not blocked.

        Raises:
            HotkeyRegistrationError: If the new binding could not be registered.
        """
        with self._binding_lock:
            with self._lock:
                if self._state is WindowState.QUIT:
                    raise HotkeyRegistrationError("Application is shutting down")
                old = self._hotkey
                if old is not None and _same_hotkey(old, new_hotkey):
                    logger.debug("Hotkey unchanged (%s)", new_hotkey)
                    self._hotkey = new_hotkey
                    return

            self._hotkeys.register(new_hotkey, self.on_hotkey)
            with self._lock:
                self._hotkey = new_hotkey

            if old is not None:
                try:
                    self._hotkeys.unregister(old)
                except HotkeyRegistrationError:
                    logger.warning("Failed to release previous hotkey %s", old, exc_info=True)

        logger.info("Global hotkey changed: %s -> %s", old, new_hotkey)

    def on_hotkey(self) -> None:
        """Hotkey callback: toggle visibility, prefilling from the clipboard on show."""
        events: list[tuple[str, dict[str, object]]] = []
        with self._lock:
            if self._state is WindowState.QUIT:
                return
            now = time.monotonic()
            if now - self._last_trigger < self._debounce:
                return
            self._last_trigger = now

            if self._state is WindowState.HIDDEN:
                text = self._read_clipboard()
                self._state = WindowState.VISIBLE
                events.append((HOTKEY_TRIGGERED, {"text": text}))
                events.append((WINDOW_SHOWN, {}))
            else:
                self._state = WindowState.HIDDEN
                events.append((WINDOW_HIDDEN, {}))

        logger.info("Global shortcut triggered, window now %s", self._state.name.lower())
        for name, payload in events:
            self._event_bus.emit(name, **payload)

    def show(self) -> bool:
        """Show the window. Returns False when it already was visible."""
        with self._lock:
            if self._state is not WindowState.HIDDEN:
                return False
            self._state = WindowState.VISIBLE
        self._event_bus.emit(WINDOW_SHOWN)
        return True

    def hide(self) -> bool:
        """Hide the window. Returns False when it already was hidden."""
        with self._lock:
            if self._state is not WindowState.VISIBLE:
                return False
            self._state = WindowState.HIDDEN
        self._event_bus.emit(WINDOW_HIDDEN)
        return True

    def close_requested(self) -> None:
        """Closing the window hides it; the process keeps running in the background."""
        self.hide()

    def quit(self) -> None:
        """Terminal transition: release the binding and stop the backend."""
        with self._binding_lock:
            with self._lock:
                if self._state is WindowState.QUIT:
                    return
                self._state = WindowState.QUIT
                hotkey, self._hotkey = self._hotkey, None

            if hotkey is not None:
                try:
                    self._hotkeys.unregister(hotkey)
                except HotkeyRegistrationError:
                    logger.warning("Failed to release hotkey %s on quit", hotkey, exc_info=True)
            self._hotkeys.stop()
        logger.info("Window controller stopped")
        self._event_bus.emit(APP_QUIT)

    def _read_clipboard(self) -> str:
        if self._clipboard is None:
            return ""
        text = self._clipboard.read()
        if text is None:
            logger.warning("Failed to read clipboard, prefilling with empty text")
            return ""
        return text


def _same_hotkey(a: str, b: str) -> bool:
    try:
        return normalize_hotkey(a) == normalize_hotkey(b)
    except ValueError:
        return False
