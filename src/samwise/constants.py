"""Default values, paths, and version constants."""

from __future__ import annotations

import os
from pathlib import Path

# Version
VERSION = "0.1.0"
APP_NAME = "samwise"
APP_ID = "com.github.samwise"

# XDG directories
XDG_CONFIG_HOME = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))

# Application directories
CONFIG_DIR = XDG_CONFIG_HOME / APP_NAME

# Configuration files
CONFIG_FILE = CONFIG_DIR / "config.json"
PROMPTS_FILE = CONFIG_DIR / "prompts.json"

# Hotkey defaults
DEFAULT_HOTKEY = "CmdOrCtrl+Shift+Space"
HOTKEY_DEBOUNCE = 0.3  # seconds; swallows key auto-repeat

# Model defaults
DEFAULT_MODEL = "claude-3-5-sonnet"
DEFAULT_CLAUDE_CLI_MODEL = "claude-3-5-sonnet-20241022"

# Known models, shown in the model selection menu: (id, label, provider)
SUPPORTED_MODELS = [
    ("gpt-4", "GPT-4", "openai"),
    ("gpt-3.5-turbo", "GPT-3.5 Turbo", "openai"),
    ("claude-3-5-sonnet", "Claude 3.5 Sonnet", "anthropic"),
    ("claude-3-opus", "Claude 3 Opus", "anthropic"),
    ("claude-3-haiku", "Claude 3 Haiku", "anthropic"),
    ("anthropic/claude-3-5-sonnet", "Claude 3.5 Sonnet (AtlasCloud)", "atlascloud"),
    ("anthropic/claude-3-haiku", "Claude 3 Haiku (AtlasCloud)", "atlascloud"),
    ("openai/gpt-5.1", "GPT-5.1 (AtlasCloud)", "atlascloud"),
    ("openai/gpt-5-mini-developer", "GPT-5 Mini (AtlasCloud)", "atlascloud"),
    ("deepseek-ai/deepseek-v3.2-speciale", "DeepSeek V3.2 (AtlasCloud)", "atlascloud"),
    ("google/gemini-2.5-flash", "Gemini 2.5 Flash (AtlasCloud)", "atlascloud"),
]

# Claude CLI
CLAUDE_CLI_BINARY = "claude"

# Provider endpoints
ATLASCLOUD_BASE_URL = "https://api.atlascloud.ai/v1"

# Per-family output limits
ANTHROPIC_MAX_TOKENS = 4096
OPENAI_MAX_TOKENS = 4096
ATLASCLOUD_MAX_TOKENS = 2048

# Wall-clock bound for one dispatch, in seconds
DISPATCH_TIMEOUT = 60.0

# Local API used by the UI
API_DEFAULT_HOST = "127.0.0.1"
API_DEFAULT_PORT = 7866

# Logging
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
