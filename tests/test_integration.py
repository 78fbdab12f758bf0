"""Import smoke tests and command-line wiring."""

from __future__ import annotations

import importlib
import io
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from samwise.__main__ import main, parse_args


class TestModuleImports:
    """Verify all modules can be imported without errors."""

    @pytest.mark.parametrize(
        "module",
        [
            "samwise",
            "samwise.constants",
            "samwise.errors",
            "samwise.config",
            "samwise.prompts",
            "samwise.events",
            "samwise.app",
            "samwise.window",
            "samwise.platform.detect",
            "samwise.llm.base",
            "samwise.llm.resolver",
            "samwise.llm.dispatcher",
            "samwise.llm.claude_cli",
            "samwise.llm.anthropic_llm",
            "samwise.llm.openai_llm",
            "samwise.output.clipboard",
            "samwise.input.hotkey",
            "samwise.web.server",
        ],
    )
    def test_import(self, module: str) -> None:
        """Each module should import without error."""
        importlib.import_module(module)


class TestCommandLine:
    def test_defaults(self) -> None:
        args = parse_args([])
        assert args.port == 7866
        assert args.apply is None

    def test_list_prompts(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with patch("samwise.__main__.ensure_directories"):
            main(["--config", str(tmp_path / "config.json"), "--list-prompts"])
        assert "fix_grammar" in capsys.readouterr().out

    def test_apply_failure_exits_nonzero(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config = tmp_path / "config.json"
        config.write_text('{"selected_model": "gpt-4"}')

        with (
            patch("samwise.__main__.ensure_directories"),
            patch.object(sys, "stdin", io.StringIO("some text")),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--config", str(config), "--apply", "fix_grammar"])

        assert exc_info.value.code == 1
        assert "No OpenAI API key configured" in capsys.readouterr().err
