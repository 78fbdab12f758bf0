"""Samwise: transform any text with an LLM from a global hotkey."""

from samwise.constants import VERSION

__version__ = VERSION
