"""X11 global hotkey backend using python-xlib XGrabKey."""

from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Callable

from Xlib import X, XK, display, error

from samwise.input.hotkey import HotkeyBackend, HotkeyRegistrationError, parse_hotkey

logger = logging.getLogger(__name__)

_MODIFIER_MASKS = {
    "ctrl": X.ControlMask,
    "shift": X.ShiftMask,
    "alt": X.Mod1Mask,
    "super": X.Mod4Mask,
}

# Key names whose X keysym is spelled differently
_KEYSYM_ALIASES = {
    "esc": "Escape",
    "escape": "Escape",
    "enter": "Return",
    "return": "Return",
    "backspace": "BackSpace",
    "pageup": "Prior",
    "page_up": "Prior",
    "pagedown": "Next",
    "page_down": "Next",
}

# Grab with and without NumLock (Mod2Mask) and CapsLock (LockMask)
_LOCK_VARIANTS = (0, X.Mod2Mask, X.LockMask, X.Mod2Mask | X.LockMask)

_REQUEST_TIMEOUT = 2.0


def _lookup_keysym(key_name: str) -> int:
    candidates = [_KEYSYM_ALIASES.get(key_name, key_name), key_name.capitalize(), key_name.upper()]
    for name in candidates:
        keysym = XK.string_to_keysym(name)
        if keysym:
            return keysym
    return 0


class X11HotkeyBackend(HotkeyBackend):
    """Global hotkey backend using X11 XGrabKey via python-xlib.

    The X connection is owned by the listener thread; register/unregister
    are marshalled onto it through a request queue and wait for the result,
    so a grab conflict (BadAccess) is reported synchronously to the caller.
    """

    def __init__(self) -> None:
        # normalized hotkey -> (keycode, mod_mask, callback)
        self._grabs: dict[str, tuple[int, int, Callable[[], None]]] = {}
        self._requests: queue.Queue[tuple[str, str, Any, Future]] = queue.Queue()
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()
        self._running = False
        self._display: Any = None

    @property
    def bindings(self) -> list[str]:
        return list(self._grabs)

    def register(self, hotkey: str, callback: Callable[[], None]) -> None:
        self._submit("register", hotkey, callback)
        logger.info("Registered X11 hotkey: %s", hotkey)

    def unregister(self, hotkey: str) -> None:
        self._submit("unregister", hotkey, None)

    def start(self) -> None:
        if self._running:
            return

        try:
            self._display = display.Display()
        except error.DisplayError as e:
            raise HotkeyRegistrationError(f"Cannot connect to the X display: {e}") from e
        self._running = True
        self._thread = threading.Thread(target=self._listen_loop, daemon=True, name="x11-hotkey")
        self._thread.start()
        self._ready.wait(timeout=_REQUEST_TIMEOUT)

    def stop(self) -> None:
        self._running = False
        if self._thread is not None:
            self._thread.join(timeout=_REQUEST_TIMEOUT)
            self._thread = None

    def _submit(self, op: str, hotkey: str, callback: Callable[[], None] | None) -> None:
        if not self._running:
            self.start()

        fut: Future = Future()
        self._requests.put((op, hotkey, callback, fut))
        try:
            fut.result(timeout=_REQUEST_TIMEOUT)
            return
        except FutureTimeoutError:
            # A cancelled request is skipped by the listener and never grabs
            if fut.cancel():
                raise HotkeyRegistrationError(
                    f"X11 hotkey listener did not respond ({op} {hotkey})"
                ) from None

        # Already picked up by the listener: its outcome stands
        try:
            fut.result(timeout=_REQUEST_TIMEOUT)
        except FutureTimeoutError as e:
            raise HotkeyRegistrationError(
                f"X11 hotkey listener did not respond ({op} {hotkey})"
            ) from e

    def _grab(self, hotkey: str, callback: Callable[[], None]) -> None:
        try:
            modifiers, key_name = parse_hotkey(hotkey)
        except ValueError as e:
            raise HotkeyRegistrationError(str(e)) from e

        normalized = "+".join([*modifiers, key_name])
        if normalized in self._grabs:
            raise HotkeyRegistrationError(f"Hotkey '{hotkey}' is already registered")

        disp = self._display
        keysym = _lookup_keysym(key_name)
        keycode = disp.keysym_to_keycode(keysym) if keysym else 0
        if keycode == 0:
            raise HotkeyRegistrationError(f"Cannot map key '{key_name}' to a keycode")

        mod_mask = 0
        for mod in modifiers:
            mod_mask |= _MODIFIER_MASKS[mod]

        root = disp.screen().root
        catcher = error.CatchError(error.BadAccess)
        for extra_mod in _LOCK_VARIANTS:
            root.grab_key(
                keycode,
                mod_mask | extra_mod,
                True,
                X.GrabModeAsync,
                X.GrabModeAsync,
                onerror=catcher,
            )
        disp.sync()

        if catcher.get_error():
            self._ungrab(keycode, mod_mask)
            raise HotkeyRegistrationError(
                f"Failed to register hotkey '{hotkey}'. It may be in use by another "
                "application or your system."
            )

        self._grabs[normalized] = (keycode, mod_mask, callback)
        logger.info("X11: grabbed keycode=%d, mod_mask=%d for '%s'", keycode, mod_mask, hotkey)

    def _release(self, hotkey: str) -> None:
        try:
            modifiers, key_name = parse_hotkey(hotkey)
        except ValueError:
            return
        grab = self._grabs.pop("+".join([*modifiers, key_name]), None)
        if grab is not None:
            self._ungrab(grab[0], grab[1])
            self._display.sync()
            logger.info("X11: released '%s'", hotkey)

    def _ungrab(self, keycode: int, mod_mask: int) -> None:
        root = self._display.screen().root
        for extra_mod in _LOCK_VARIANTS:
            root.ungrab_key(keycode, mod_mask | extra_mod)

    def _process_requests(self) -> None:
        while True:
            try:
                op, hotkey, callback, fut = self._requests.get_nowait()
            except queue.Empty:
                return
            if not fut.set_running_or_notify_cancel():
                logger.debug("Skipping abandoned %s request for %s", op, hotkey)
                continue
            try:
                if op == "register":
                    self._grab(hotkey, callback)
                else:
                    self._release(hotkey)
            except Exception as e:
                fut.set_exception(e)
            else:
                fut.set_result(None)

    def _listen_loop(self) -> None:
        """Main X11 event loop for hotkey listening."""
        disp = self._display
        self._ready.set()
        logger.info("X11 hotkey listener running")

        while self._running:
            self._process_requests()

            while disp.pending_events() > 0 and self._running:
                event = disp.next_event()
                if event.type != X.KeyPress:
                    continue
                # Mask out NumLock and CapsLock for comparison
                clean_state = event.state & ~(X.Mod2Mask | X.LockMask)
                for keycode, mod_mask, callback in list(self._grabs.values()):
                    if event.detail == keycode and clean_state == mod_mask:
                        try:
                            callback()
                        except Exception:
                            logger.exception("Error in hotkey callback")

            # Small sleep to avoid busy-waiting
            time.sleep(0.05)

        for keycode, mod_mask, _ in self._grabs.values():
            self._ungrab(keycode, mod_mask)
        self._grabs.clear()
        disp.close()
        self._display = None
        logger.info("X11 hotkey listener stopped")
