"""Exception hierarchy shared across Samwise components."""

from __future__ import annotations


class SamwiseError(Exception):
    """Base class for all errors surfaced to the UI."""


class ConfigError(SamwiseError):
    """Raised when the configuration file cannot be written."""


class PromptNotFoundError(SamwiseError):
    """Raised when a prompt id is not in the catalog."""

    def __init__(self, prompt_id: str) -> None:
        self.prompt_id = prompt_id
        super().__init__(f"Prompt not found: {prompt_id}")
