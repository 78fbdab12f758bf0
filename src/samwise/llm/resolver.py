"""Provider resolution: which backend handles a model id, and how.

Resolution is ordered and first-match-wins:

1. Claude family ids (``claude-*``): the Claude CLI when enabled and present
   on PATH, else the Anthropic API when a key is set.
2. OpenAI family ids (``gpt-*``, ``o1``...): the OpenAI API when a key is set.
3. Vendor-qualified ids (``vendor/model``): the AtlasCloud API when a key is
   set. ``anthropic/claude-*`` ids land here, not in the Claude branch.
4. Anything else is unsupported.

A family without usable credentials resolves to an unconfigured plan; the
dispatcher turns both unconfigured and unsupported plans into errors.
"""

from __future__ import annotations

import functools
import logging
import re
import shutil
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from samwise.config import AppConfig
from samwise.constants import CLAUDE_CLI_BINARY

logger = logging.getLogger(__name__)

_CLAUDE_PATTERN = re.compile(r"^claude(-|$)")
_OPENAI_PATTERN = re.compile(r"^(gpt-|chatgpt-|o1|o3|o4)")
_VENDOR_PATTERN = re.compile(r"^[^/\s]+/\S+$")


class ProviderFamily(Enum):
    CLAUDE = "claude"
    OPENAI = "openai"
    ATLASCLOUD = "atlascloud"
    UNSUPPORTED = "unsupported"


class Route(Enum):
    CLI = "cli"
    ANTHROPIC_API = "anthropic_api"
    OPENAI_API = "openai_api"
    ATLASCLOUD_API = "atlascloud_api"
    NONE = "none"


@dataclass(frozen=True)
class ProviderPlan:
    """The resolved family and execution route for one model id."""

    family: ProviderFamily
    route: Route
    model: str
    api_key: str | None = None
    max_tokens: int = 0
    reason: str = ""

    @property
    def configured(self) -> bool:
        return self.route is not Route.NONE

    def __repr__(self) -> str:
        # Keeps the API key out of logs
        return (
            f"ProviderPlan(family={self.family.name}, route={self.route.name}, "
            f"model={self.model!r})"
        )


@functools.lru_cache(maxsize=None)
def claude_cli_available(binary: str = CLAUDE_CLI_BINARY) -> bool:
    """Whether the Claude CLI is on PATH. Probed once per process."""
    path = shutil.which(binary)
    if path:
        logger.info("Claude CLI found at %s", path)
    else:
        logger.info("Claude CLI '%s' not found on PATH", binary)
    return path is not None


def is_claude_model(model_id: str) -> bool:
    return bool(_CLAUDE_PATTERN.match(model_id))


def is_openai_model(model_id: str) -> bool:
    return bool(_OPENAI_PATTERN.match(model_id))


def is_vendor_qualified(model_id: str) -> bool:
    return bool(_VENDOR_PATTERN.match(model_id))


def resolve(
    model_id: str,
    config: AppConfig,
    cli_probe: Callable[[], bool] | None = None,
) -> ProviderPlan:
    """Resolve ``model_id`` to a provider plan. Never raises.

    Args:
        model_id: The selected model identifier.
        config: Configuration snapshot.
        cli_probe: Reports whether the Claude CLI is usable; defaults to the
            cached process-wide probe. Only called for Claude ids with the
            CLI enabled.
    """
    llm = config.llm

    if is_claude_model(model_id):
        if llm.use_claude_cli:
            probe = cli_probe or claude_cli_available
            if probe():
                return ProviderPlan(ProviderFamily.CLAUDE, Route.CLI, llm.claude_cli_model)
        if llm.anthropic_api_key:
            return ProviderPlan(
                ProviderFamily.CLAUDE,
                Route.ANTHROPIC_API,
                model_id,
                api_key=llm.anthropic_api_key,
                max_tokens=llm.anthropic_max_tokens,
            )
        if llm.use_claude_cli:
            reason = "Claude CLI was not found and no Anthropic API key is configured"
        else:
            reason = "Claude CLI is disabled and no Anthropic API key is configured"
        return ProviderPlan(ProviderFamily.CLAUDE, Route.NONE, model_id, reason=reason)

    if is_openai_model(model_id):
        if llm.openai_api_key:
            return ProviderPlan(
                ProviderFamily.OPENAI,
                Route.OPENAI_API,
                model_id,
                api_key=llm.openai_api_key,
                max_tokens=llm.openai_max_tokens,
            )
        return ProviderPlan(
            ProviderFamily.OPENAI, Route.NONE, model_id, reason="No OpenAI API key configured"
        )

    if is_vendor_qualified(model_id):
        if llm.atlascloud_api_key:
            return ProviderPlan(
                ProviderFamily.ATLASCLOUD,
                Route.ATLASCLOUD_API,
                model_id,
                api_key=llm.atlascloud_api_key,
                max_tokens=llm.atlascloud_max_tokens,
            )
        return ProviderPlan(
            ProviderFamily.ATLASCLOUD,
            Route.NONE,
            model_id,
            reason="No AtlasCloud API key configured",
        )

    return ProviderPlan(
        ProviderFamily.UNSUPPORTED, Route.NONE, model_id, reason=f"Unsupported model: {model_id}"
    )
