"""Configuration loading and saving (JSON)."""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
import threading
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from samwise.constants import (
    ANTHROPIC_MAX_TOKENS,
    ATLASCLOUD_MAX_TOKENS,
    CONFIG_FILE,
    DEFAULT_CLAUDE_CLI_MODEL,
    DEFAULT_HOTKEY,
    DEFAULT_MODEL,
    DISPATCH_TIMEOUT,
    OPENAI_MAX_TOKENS,
)
from samwise.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Provider credentials and dispatch tuning."""

    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    atlascloud_api_key: str | None = None
    use_claude_cli: bool = True  # still requires the binary on PATH
    claude_cli_model: str = DEFAULT_CLAUDE_CLI_MODEL
    anthropic_max_tokens: int = ANTHROPIC_MAX_TOKENS
    openai_max_tokens: int = OPENAI_MAX_TOKENS
    atlascloud_max_tokens: int = ATLASCLOUD_MAX_TOKENS
    request_timeout: float = DISPATCH_TIMEOUT


@dataclass
class AppConfig:
    """Root application configuration."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    selected_model: str = DEFAULT_MODEL
    global_hotkey: str = DEFAULT_HOTKEY

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        """Build a config from a decoded JSON object, preserving defaults for missing keys."""
        return _merge_config(cls(), data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ConfigStore:
    """Single owner of the persisted config file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash mid-write never leaves a truncated config behind.
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or CONFIG_FILE
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AppConfig:
        """Load config from disk, falling back to defaults."""
        if not self._path.exists():
            logger.info("No config file found at %s, using defaults", self._path)
            return AppConfig()

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level JSON value is not an object")
            config = AppConfig.from_dict(data)
            logger.info("Loaded config from %s", self._path)
            return config
        except (OSError, ValueError):
            logger.warning("Failed to load config from %s, using defaults", self._path, exc_info=True)
            return AppConfig()

    def save(self, config: AppConfig) -> None:
        """Atomically replace the config file.

        Raises:
            ConfigError: If the file could not be written.
        """
        payload = json.dumps(config.to_dict(), indent=2)

        with self._lock:
            tmp_name: str | None = None
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, self._path)
                tmp_name = None
            except OSError as e:
                raise ConfigError(f"Failed to write config to {self._path}: {e}") from e
            finally:
                if tmp_name is not None:
                    Path(tmp_name).unlink(missing_ok=True)

        logger.info("Saved config to %s", self._path)


_API_KEY_FIELDS = ("openai_api_key", "anthropic_api_key", "atlascloud_api_key")


def coerce_llm_value(key: str, default: Any, val: Any) -> Any:
    """Convert ``val`` to the type of the ``llm.<key>`` field whose default is ``default``.

    Numeric fields accept numbers and numeric strings and must be positive.

    Raises:
        ValueError: If ``val`` cannot be used for that field.
    """
    if key in _API_KEY_FIELDS:
        if val is None or isinstance(val, str):
            return val
    elif isinstance(default, bool):
        if isinstance(val, bool):
            return val
    elif isinstance(default, (int, float)):
        if isinstance(val, (int, float, str)) and not isinstance(val, bool):
            try:
                number = type(default)(val)
            except (ValueError, OverflowError):
                number = None
            if number is not None and math.isfinite(number) and number > 0:
                return number
    elif isinstance(default, str):
        if isinstance(val, str) and val:
            return val
    raise ValueError(f"Invalid value for llm.{key}: {val!r}")


def check_llm_settings(data: dict[str, Any]) -> None:
    """Raise ValueError for the first known llm setting whose value is unusable."""
    defaults = LLMConfig()
    for key, val in data.items():
        if hasattr(defaults, key):
            coerce_llm_value(key, getattr(defaults, key), val)


def _merge_config(config: AppConfig, data: dict[str, Any]) -> AppConfig:
    """Merge a JSON dict into an AppConfig, ignoring unknown keys and unusable values."""
    llm = data.get("llm")
    if isinstance(llm, dict):
        for key, val in llm.items():
            if not hasattr(config.llm, key):
                continue
            current = getattr(config.llm, key)
            try:
                setattr(config.llm, key, coerce_llm_value(key, current, val))
            except ValueError as e:
                logger.warning("%s, keeping %r", e, current)

    # Empty strings from the settings form mean "no key"
    for key in _API_KEY_FIELDS:
        if not getattr(config.llm, key):
            setattr(config.llm, key, None)

    if isinstance(data.get("selected_model"), str):
        config.selected_model = data["selected_model"]
    if isinstance(data.get("global_hotkey"), str):
        config.global_hotkey = data["global_hotkey"]

    return config
