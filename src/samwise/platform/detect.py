"""Detect the session's display server and the clipboard tools it offers."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class DisplayServer(Enum):
    X11 = "x11"
    WAYLAND = "wayland"
    UNKNOWN = "unknown"


# Clipboard tool -> binary probed on PATH
_CLIPBOARD_BINARIES = {
    "wl-clipboard": "wl-copy",
    "xclip": "xclip",
    "xsel": "xsel",
}

# Preference per display server; under XWayland the X tools still work
_CLIPBOARD_PREFERENCE = {
    DisplayServer.WAYLAND: ("wl-clipboard", "xclip", "xsel"),
    DisplayServer.X11: ("xclip", "xsel"),
    DisplayServer.UNKNOWN: ("xclip", "xsel"),
}


@dataclass(frozen=True)
class PlatformInfo:
    """What the session offers for global hotkeys and clipboard access."""

    display_server: DisplayServer
    has_x_display: bool  # XGrabKey target, native or XWayland
    has_xclip: bool
    has_xsel: bool
    has_wl_clipboard: bool

    def has_clipboard_tool(self, tool: str) -> bool:
        return {
            "wl-clipboard": self.has_wl_clipboard,
            "xclip": self.has_xclip,
            "xsel": self.has_xsel,
        }.get(tool, False)

    @property
    def best_clipboard_tool(self) -> str | None:
        for tool in _CLIPBOARD_PREFERENCE[self.display_server]:
            if self.has_clipboard_tool(tool):
                return tool
        return None


def _detect_display_server() -> DisplayServer:
    session_type = os.environ.get("XDG_SESSION_TYPE", "").lower()
    if session_type in ("x11", "wayland"):
        return DisplayServer(session_type)

    # tty/ssh sessions and minimal window managers leave XDG_SESSION_TYPE unset
    if os.environ.get("WAYLAND_DISPLAY"):
        return DisplayServer.WAYLAND
    if os.environ.get("DISPLAY"):
        return DisplayServer.X11
    return DisplayServer.UNKNOWN


def detect_platform() -> PlatformInfo:
    """Probe the environment and PATH once at startup."""
    found = {tool: shutil.which(binary) is not None for tool, binary in _CLIPBOARD_BINARIES.items()}
    info = PlatformInfo(
        display_server=_detect_display_server(),
        has_x_display=bool(os.environ.get("DISPLAY")),
        has_xclip=found["xclip"],
        has_xsel=found["xsel"],
        has_wl_clipboard=found["wl-clipboard"],
    )

    logger.info(
        "Platform detected: display=%s, x_display=%s, clipboard=%s",
        info.display_server.value,
        info.has_x_display,
        info.best_clipboard_tool or "none",
    )
    return info
