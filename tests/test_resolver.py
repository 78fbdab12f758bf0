"""Tests for model id -> provider plan resolution."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from samwise.config import AppConfig
from samwise.constants import SUPPORTED_MODELS
from samwise.llm.resolver import ProviderFamily, Route, is_vendor_qualified, resolve


def _config(**llm: object) -> AppConfig:
    return AppConfig.from_dict({"llm": llm})


class TestClaudeResolution:
    def test_cli_preferred_when_available(self) -> None:
        config = _config(anthropic_api_key="sk-ant")
        plan = resolve("claude-3-5-sonnet", config, cli_probe=lambda: True)

        assert plan.family is ProviderFamily.CLAUDE
        assert plan.route is Route.CLI
        assert plan.model == config.llm.claude_cli_model

    def test_api_when_cli_missing(self) -> None:
        plan = resolve("claude-3-haiku", _config(anthropic_api_key="sk-ant"), cli_probe=lambda: False)

        assert plan.route is Route.ANTHROPIC_API
        assert plan.model == "claude-3-haiku"
        assert plan.api_key == "sk-ant"

    def test_cli_disabled_skips_probe(self) -> None:
        probe = MagicMock(return_value=True)
        plan = resolve(
            "claude-3-opus", _config(use_claude_cli=False, anthropic_api_key="k"), cli_probe=probe
        )

        assert plan.route is Route.ANTHROPIC_API
        probe.assert_not_called()

    def test_not_configured_without_cli_or_key(self) -> None:
        plan = resolve("claude-3-5-sonnet", _config(), cli_probe=lambda: False)

        assert plan.family is ProviderFamily.CLAUDE
        assert plan.route is Route.NONE
        assert not plan.configured
        assert "Anthropic API key" in plan.reason


class TestOpenAIResolution:
    def test_with_key(self) -> None:
        plan = resolve("gpt-4", _config(openai_api_key="sk-openai"))
        assert plan.family is ProviderFamily.OPENAI
        assert plan.route is Route.OPENAI_API
        assert plan.api_key == "sk-openai"

    def test_without_key_is_not_configured(self) -> None:
        plan = resolve("gpt-4", _config(anthropic_api_key="sk-ant"))
        assert plan.family is ProviderFamily.OPENAI
        assert not plan.configured

    @pytest.mark.parametrize("model", ["gpt-3.5-turbo", "chatgpt-4o-latest", "o1-mini", "o3", "o4-mini"])
    def test_openai_family_ids(self, model: str) -> None:
        assert resolve(model, _config()).family is ProviderFamily.OPENAI

    def test_non_claude_ids_never_probe_cli(self) -> None:
        probe = MagicMock(return_value=True)
        for model in ("gpt-4", "google/gemini-2.5-flash", "llama-3"):
            resolve(model, _config(), cli_probe=probe)
        probe.assert_not_called()


class TestAtlasCloudResolution:
    def test_vendor_qualified_with_key(self) -> None:
        plan = resolve("deepseek-ai/deepseek-v3.2-speciale", _config(atlascloud_api_key="ac"))
        assert plan.family is ProviderFamily.ATLASCLOUD
        assert plan.route is Route.ATLASCLOUD_API
        assert plan.model == "deepseek-ai/deepseek-v3.2-speciale"

    def test_anthropic_prefix_goes_to_atlascloud(self) -> None:
        probe = MagicMock(return_value=True)
        config = _config(atlascloud_api_key="ac", anthropic_api_key="sk-ant")
        plan = resolve("anthropic/claude-3-5-sonnet", config, cli_probe=probe)

        assert plan.route is Route.ATLASCLOUD_API
        probe.assert_not_called()

    def test_without_key_is_not_configured(self) -> None:
        plan = resolve("google/gemini-2.5-flash", _config())
        assert plan.family is ProviderFamily.ATLASCLOUD
        assert not plan.configured

    def test_vendor_pattern(self) -> None:
        assert is_vendor_qualified("openai/gpt-5.1")
        assert not is_vendor_qualified("gpt-4")
        assert is_vendor_qualified("meta-llama/llama-3.1+instruct")
        assert is_vendor_qualified("qwen/qwen3/coder")
        assert not is_vendor_qualified("/gpt-4")
        assert not is_vendor_qualified("openai/")
        assert not is_vendor_qualified("open ai/gpt-4")


class TestUnsupported:
    @pytest.mark.parametrize("model", ["llama-3", "mistral-large", "", "claudette"])
    def test_unknown_ids(self, model: str) -> None:
        plan = resolve(model, _config(openai_api_key="k", atlascloud_api_key="k"))
        assert plan.family is ProviderFamily.UNSUPPORTED
        assert not plan.configured

    def test_every_listed_model_is_supported(self) -> None:
        for model_id, _, _ in SUPPORTED_MODELS:
            plan = resolve(model_id, _config(), cli_probe=lambda: False)
            assert plan.family is not ProviderFamily.UNSUPPORTED, model_id


class TestPlanRepr:
    def test_repr_hides_api_key(self) -> None:
        plan = resolve("gpt-4", _config(openai_api_key="sk-secret"))
        assert "sk-secret" not in repr(plan)
