"""Global hotkey backends: parsing, the backend interface, and the factory."""

from __future__ import annotations

import abc
import logging
from typing import TYPE_CHECKING, Callable

from samwise.errors import SamwiseError

if TYPE_CHECKING:
    from samwise.platform.detect import PlatformInfo

logger = logging.getLogger(__name__)

# Accelerator modifier aliases -> canonical modifier
_MODIFIER_ALIASES = {
    "cmdorctrl": "ctrl",
    "commandorcontrol": "ctrl",
    "ctrl": "ctrl",
    "control": "ctrl",
    "shift": "shift",
    "alt": "alt",
    "option": "alt",
    "super": "super",
    "meta": "super",
    "cmd": "super",
    "command": "super",
    "win": "super",
}

# Canonical modifier order used for normalized hotkey strings
_MODIFIER_ORDER = ("ctrl", "alt", "shift", "super")


class HotkeyRegistrationError(SamwiseError):
    """Raised when a binding cannot be registered (invalid, or claimed elsewhere)."""


def parse_hotkey(hotkey_str: str) -> tuple[list[str], str]:
    """Parse an accelerator like 'CmdOrCtrl+Shift+Space' into modifiers + key.

    Returns:
        Tuple of (canonical modifier names in fixed order, lowercase key name).

    Raises:
        ValueError: On an empty string, an unknown modifier, or a missing key.
    """
    parts = [p.strip() for p in hotkey_str.split("+")]
    if not hotkey_str.strip() or any(not p for p in parts):
        raise ValueError(f"Invalid hotkey string: {hotkey_str!r}")

    *mod_parts, key = parts
    if key.lower() in _MODIFIER_ALIASES:
        raise ValueError(f"No key found in hotkey string: {hotkey_str!r}")

    modifiers: set[str] = set()
    for part in mod_parts:
        canonical = _MODIFIER_ALIASES.get(part.lower())
        if canonical is None:
            raise ValueError(f"Unknown modifier {part!r} in hotkey string: {hotkey_str!r}")
        modifiers.add(canonical)

    return [m for m in _MODIFIER_ORDER if m in modifiers], key.lower()


def normalize_hotkey(hotkey_str: str) -> str:
    """Canonical form used to compare bindings, e.g. 'ctrl+shift+space'."""
    modifiers, key = parse_hotkey(hotkey_str)
    return "+".join([*modifiers, key])


class HotkeyBackend(abc.ABC):
    """OS-level global shortcut registry.

    Implementations invoke callbacks from their own listener thread.
    """

    @abc.abstractmethod
    def register(self, hotkey: str, callback: Callable[[], None]) -> None:
        """Register a global hotkey.

        Raises:
            HotkeyRegistrationError: If the string is invalid or the binding
                is already held by this or another process.
        """
        ...

    @abc.abstractmethod
    def unregister(self, hotkey: str) -> None:
        """Remove a binding. Unknown bindings are ignored."""
        ...

    @property
    @abc.abstractmethod
    def bindings(self) -> list[str]:
        """Normalized strings of the currently registered bindings."""
        ...

    @abc.abstractmethod
    def start(self) -> None:
        """Start listening for hotkeys in a background thread."""
        ...

    @abc.abstractmethod
    def stop(self) -> None:
        """Release all bindings and stop listening."""
        ...


def create_hotkey_backend(platform: PlatformInfo) -> HotkeyBackend:
    """Factory: create the appropriate hotkey backend for the platform."""
    if platform.has_x_display:
        # On Wayland this grabs through XWayland, which only sees X clients
        try:
            from samwise.input.x11_hotkey import X11HotkeyBackend

            logger.info("Using X11 XGrabKey for hotkeys")
            return X11HotkeyBackend()
        except ImportError:
            logger.warning("X11 hotkey support unavailable (python-xlib not installed)")

    try:
        from samwise.input.pynput_hotkey import PynputHotkeyBackend

        logger.info("Using pynput for hotkeys (fallback)")
        return PynputHotkeyBackend()
    except ImportError:
        pass

    raise RuntimeError(
        "No hotkey backend available. Install python-xlib (X11) or pynput."
    )
