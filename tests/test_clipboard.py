"""Tests for clipboard read/write through the desktop tools."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock, patch

import pytest

from samwise.output.clipboard import Clipboard
from samwise.platform.detect import DisplayServer, PlatformInfo


def _platform(server: DisplayServer = DisplayServer.X11, **tools: bool) -> PlatformInfo:
    return PlatformInfo(
        display_server=server,
        has_x_display=server == DisplayServer.X11,
        has_xclip=tools.get("has_xclip", False),
        has_xsel=tools.get("has_xsel", False),
        has_wl_clipboard=tools.get("has_wl_clipboard", False),
    )


def _completed(returncode: int = 0, stdout: str = "", stderr: str = "") -> MagicMock:
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


class TestClipboardRead:
    def test_reads_with_wl_paste(self) -> None:
        clipboard = Clipboard(_platform(DisplayServer.WAYLAND, has_wl_clipboard=True))
        with patch("samwise.output.clipboard.subprocess.run", return_value=_completed(stdout="hi")) as run:
            assert clipboard.read() == "hi"
        assert run.call_args[0][0] == ["wl-paste", "--no-newline"]

    def test_empty_clipboard_reads_as_empty_string(self) -> None:
        clipboard = Clipboard(_platform(has_xsel=True))
        with patch(
            "samwise.output.clipboard.subprocess.run",
            return_value=_completed(returncode=1, stderr="Nothing is copied"),
        ):
            assert clipboard.read() == ""

    def test_tool_error_returns_none(self) -> None:
        clipboard = Clipboard(_platform(has_xclip=True))
        with patch(
            "samwise.output.clipboard.subprocess.run",
            return_value=_completed(returncode=2, stderr="Error: Can't open display"),
        ):
            assert clipboard.read() is None

    def test_timeout_returns_none(self) -> None:
        clipboard = Clipboard(_platform(has_xclip=True))
        with patch(
            "samwise.output.clipboard.subprocess.run",
            side_effect=subprocess.TimeoutExpired("xclip", 5),
        ):
            assert clipboard.read() is None

    def test_no_tool(self) -> None:
        clipboard = Clipboard(_platform())
        assert clipboard.tool is None
        assert clipboard.read() is None
        assert clipboard.write("x") is False


class TestClipboardWrite:
    @patch("samwise.output.clipboard.time.sleep")
    @patch("samwise.output.clipboard.subprocess.Popen")
    def test_xclip_write_does_not_wait(self, mock_popen: MagicMock, mock_sleep: MagicMock) -> None:
        proc = MagicMock()
        mock_popen.return_value = proc

        assert Clipboard(_platform(has_xclip=True)).write("héllo") is True
        proc.stdin.write.assert_called_once_with("héllo".encode())
        proc.stdin.close.assert_called_once()
        proc.wait.assert_not_called()

    def test_wl_copy_write(self) -> None:
        clipboard = Clipboard(_platform(DisplayServer.WAYLAND, has_wl_clipboard=True))
        with patch("samwise.output.clipboard.subprocess.run", return_value=_completed()) as run:
            assert clipboard.write("text") is True
        assert run.call_args[0][0] == ["wl-copy"]
        assert run.call_args[1]["input"] == "text"

    def test_write_failure(self) -> None:
        clipboard = Clipboard(_platform(has_xsel=True))
        with patch(
            "samwise.output.clipboard.subprocess.run",
            return_value=_completed(returncode=1, stderr="boom"),
        ):
            assert clipboard.write("text") is False

    def test_missing_binary(self) -> None:
        clipboard = Clipboard(_platform(has_xsel=True))
        with patch("samwise.output.clipboard.subprocess.run", side_effect=FileNotFoundError("xsel")):
            assert clipboard.write("text") is False


class TestClipboardBytes:
    def test_non_utf8_clipboard_is_decoded_with_replacement(
        self, make_script: Callable[[str, str], Path], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        script = make_script("xclip", r"printf '\377\376caf\351'")
        monkeypatch.setenv("PATH", str(script.parent))

        text = Clipboard(_platform(has_xclip=True)).read()

        assert text is not None
        assert "caf" in text
        assert "\ufffd" in text

    def test_unexpected_error_returns_none(self) -> None:
        clipboard = Clipboard(_platform(has_xclip=True))
        with patch("samwise.output.clipboard.subprocess.run", side_effect=ValueError("bad")):
            assert clipboard.read() is None
