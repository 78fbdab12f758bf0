"""Fallback hotkey backend using pynput (works on X11 and some Wayland setups)."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from pynput import keyboard

from samwise.input.hotkey import HotkeyBackend, HotkeyRegistrationError, parse_hotkey

logger = logging.getLogger(__name__)

# Canonical modifier -> pynput key after Listener.canonical()
_MODIFIER_KEYS = {
    "ctrl": keyboard.Key.ctrl,
    "shift": keyboard.Key.shift,
    "alt": keyboard.Key.alt,
    "super": keyboard.Key.cmd,
}

_SPECIAL_KEYS = {
    "esc": "esc",
    "escape": "esc",
    "return": "enter",
    "pageup": "page_up",
    "pagedown": "page_down",
}


def _parse_hotkey_to_pynput(hotkey_str: str) -> frozenset[object]:
    """Parse a hotkey string into the set of canonical pynput keys it requires."""
    modifiers, key_name = parse_hotkey(hotkey_str)

    keys: set[object] = {_MODIFIER_KEYS[m] for m in modifiers}

    special = getattr(keyboard.Key, _SPECIAL_KEYS.get(key_name, key_name), None)
    if isinstance(special, keyboard.Key):
        keys.add(special)
    elif len(key_name) == 1:
        keys.add(keyboard.KeyCode.from_char(key_name))
    else:
        raise ValueError(f"Unknown key: {key_name}")

    return frozenset(keys)


class PynputHotkeyBackend(HotkeyBackend):
    """Hotkey backend using a pynput keyboard listener.

    pynput observes keys rather than grabbing them, so a conflict with another
    process cannot be detected; duplicates within this process are rejected.
    """

    def __init__(self) -> None:
        self._bindings: dict[str, tuple[frozenset[object], Callable[[], None]]] = {}
        self._listener: keyboard.Listener | None = None
        self._current_keys: set[object] = set()
        self._lock = threading.Lock()

    @property
    def bindings(self) -> list[str]:
        with self._lock:
            return list(self._bindings)

    def register(self, hotkey: str, callback: Callable[[], None]) -> None:
        try:
            modifiers, key_name = parse_hotkey(hotkey)
            keys = _parse_hotkey_to_pynput(hotkey)
        except ValueError as e:
            raise HotkeyRegistrationError(str(e)) from e

        normalized = "+".join([*modifiers, key_name])
        with self._lock:
            if normalized in self._bindings:
                raise HotkeyRegistrationError(f"Hotkey '{hotkey}' is already registered")
            self._bindings[normalized] = (keys, callback)
        logger.info("Registered pynput hotkey: %s -> %s", hotkey, sorted(map(str, keys)))

    def unregister(self, hotkey: str) -> None:
        try:
            modifiers, key_name = parse_hotkey(hotkey)
        except ValueError:
            return
        with self._lock:
            self._bindings.pop("+".join([*modifiers, key_name]), None)

    def start(self) -> None:
        if self._listener is not None:
            return
        self._listener = keyboard.Listener(on_press=self._on_press, on_release=self._on_release)
        self._listener.start()
        logger.info("pynput hotkey listener running")

    def stop(self) -> None:
        if self._listener is not None:
            self._listener.stop()
            self._listener = None
            logger.info("pynput hotkey listener stopped")
        with self._lock:
            self._bindings.clear()

    def _canonical(self, key: object) -> object:
        if self._listener is None:
            return key
        return self._listener.canonical(key)

    def _on_press(self, key: object) -> None:
        key = self._canonical(key)
        if key in self._current_keys:
            # Auto-repeat while held
            return
        self._current_keys.add(key)

        with self._lock:
            matches = [
                callback
                for combo, callback in self._bindings.values()
                if key in combo and combo <= self._current_keys
            ]
        for callback in matches:
            try:
                callback()
            except Exception:
                logger.exception("Error in hotkey callback")

    def _on_release(self, key: object) -> None:
        self._current_keys.discard(self._canonical(key))
