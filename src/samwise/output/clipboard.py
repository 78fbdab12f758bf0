"""Clipboard access for X11 (xclip/xsel) and Wayland (wl-clipboard)."""

from __future__ import annotations

import logging
import subprocess
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from samwise.platform.detect import PlatformInfo

logger = logging.getLogger(__name__)

_READ_COMMANDS = {
    "wl-clipboard": ["wl-paste", "--no-newline"],
    "xclip": ["xclip", "-selection", "clipboard", "-o"],
    "xsel": ["xsel", "--clipboard", "--output"],
}

_WRITE_COMMANDS = {
    "wl-clipboard": ["wl-copy"],
    "xclip": ["xclip", "-selection", "clipboard"],
    "xsel": ["xsel", "--clipboard", "--input"],
}

_TIMEOUT = 5


class Clipboard:
    """Clipboard read/write through the desktop's command-line tools."""

    def __init__(self, platform: PlatformInfo) -> None:
        self._tool = platform.best_clipboard_tool

        if self._tool is None:
            logger.warning("No clipboard tool detected! Clipboard operations will fail.")

    @property
    def tool(self) -> str | None:
        return self._tool

    def read(self) -> str | None:
        """Read current clipboard text. Returns "" for an empty clipboard, None on failure."""
        if self._tool is None:
            return None

        try:
            result = subprocess.run(
                _READ_COMMANDS[self._tool],
                capture_output=True,
                text=True,
                errors="replace",
                timeout=_TIMEOUT,
            )
        except subprocess.TimeoutExpired:
            logger.error("Clipboard read timed out")
            return None
        except Exception:
            logger.exception("Clipboard read failed")
            return None

        if result.returncode != 0:
            # Empty clipboard is not an error
            if "nothing is copied" in result.stderr.lower() or result.returncode == 1:
                return ""
            logger.error("Clipboard read failed: %s", result.stderr)
            return None

        return result.stdout

    def write(self, text: str) -> bool:
        """Write text to the clipboard. Returns True on success."""
        if self._tool is None:
            logger.error("No clipboard tool available")
            return False

        try:
            if self._tool == "xclip":
                # xclip stays alive to serve paste requests, so waiting on it
                # would block until another app reads the clipboard.
                proc = subprocess.Popen(
                    _WRITE_COMMANDS["xclip"],
                    stdin=subprocess.PIPE,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                )
                if proc.stdin:
                    proc.stdin.write(text.encode())
                    proc.stdin.close()
                time.sleep(0.05)
                return True

            result = subprocess.run(
                _WRITE_COMMANDS[self._tool],
                input=text,
                text=True,
                capture_output=True,
                timeout=_TIMEOUT,
            )
        except subprocess.TimeoutExpired:
            logger.error("Clipboard write timed out")
            return False
        except Exception:
            logger.exception("Clipboard write failed")
            return False

        if result.returncode != 0:
            logger.error("Clipboard write failed: %s", result.stderr)
            return False
        return True
