"""Prompt catalog: built-in text transformations and the optional user prompts file."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

from samwise.constants import PROMPTS_FILE
from samwise.errors import PromptNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Prompt:
    """A named transformation applied to the user's text."""

    id: str
    name: str
    description: str
    system_prompt: str
    icon: str = ""


BUILTIN_PROMPTS: tuple[Prompt, ...] = (
    Prompt(
        id="fix_grammar",
        name="Fix Grammar",
        description="Correct grammar, spelling, and punctuation",
        system_prompt=(
            "Please correct the grammar, spelling, and punctuation in the text below. "
            "Keep the original meaning, tone, and intent exactly the same. Do not add new "
            "information or remove anything. Return only the corrected version."
        ),
        icon="✓",
    ),
    Prompt(
        id="improve_text",
        name="Improve Text",
        description="Make text clearer and smoother",
        system_prompt=(
            "Please rewrite the text below to make it clearer and smoother, but keep the "
            "same meaning. Use simple, everyday words (no fancy or technical vocabulary). "
            "Don't make it longer than necessary but you can make up to 50 percent longer, "
            "and keep the style sounding like the original. Return only the improved version."
        ),
        icon="✨",
    ),
    Prompt(
        id="summarize",
        name="Summarize",
        description="Create a concise summary",
        system_prompt=(
            "Please summarize the text below in a clear, concise way while keeping the main "
            "ideas and key details. Don't add new information or opinions. Keep the tone "
            "neutral and accurate."
        ),
        icon="📝",
    ),
    Prompt(
        id="expand",
        name="Expand",
        description="Add more detail and context",
        system_prompt=(
            "Please expand on the text below by adding relevant details. Keep the original "
            "meaning and tone without using complex words, but make it more comprehensive "
            "and informative. Return only the expanded version."
        ),
        icon="📖",
    ),
    Prompt(
        id="simplify",
        name="Simplify",
        description="Make text easier to understand",
        system_prompt=(
            "Please rewrite the text below using simpler language that anyone can "
            "understand. Keep the same meaning but use shorter sentences and common words. "
            "Make it clear and straightforward."
        ),
        icon="💡",
    ),
    Prompt(
        id="professional",
        name="Make Professional",
        description="Convert to formal business tone",
        system_prompt=(
            "Please rewrite the text below in a professional, business-appropriate tone. "
            "Use formal language while keeping it clear and concise. Maintain the original "
            "meaning and key points."
        ),
        icon="💼",
    ),
)


def load_prompts(path: Path | None = None) -> list[Prompt]:
    """Load prompts from the user prompts file, falling back to the built-ins."""
    prompts_path = path or PROMPTS_FILE

    if not prompts_path.exists():
        return list(BUILTIN_PROMPTS)

    try:
        with open(prompts_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        logger.warning("Failed to read prompts from %s, using built-ins", prompts_path, exc_info=True)
        return list(BUILTIN_PROMPTS)

    if not isinstance(data, list):
        logger.warning("Prompts file %s is not a list, using built-ins", prompts_path)
        return list(BUILTIN_PROMPTS)

    prompts: list[Prompt] = []
    seen: set[str] = set()
    for entry in data:
        try:
            prompt = Prompt(
                id=str(entry["id"]),
                name=str(entry["name"]),
                description=str(entry.get("description", "")),
                system_prompt=str(entry["system_prompt"]),
                icon=str(entry.get("icon", "")),
            )
        except (KeyError, TypeError, AttributeError):
            logger.warning("Skipping invalid prompt entry in %s: %r", prompts_path, entry)
            continue
        if prompt.id in seen:
            logger.warning("Skipping duplicate prompt id '%s'", prompt.id)
            continue
        seen.add(prompt.id)
        prompts.append(prompt)

    if not prompts:
        return list(BUILTIN_PROMPTS)

    logger.info("Loaded %d prompt(s) from %s", len(prompts), prompts_path)
    return prompts


def ensure_user_prompts(path: Path | None = None) -> Path:
    """Write the built-in prompts to the user prompts file if it does not exist yet."""
    prompts_path = path or PROMPTS_FILE
    if prompts_path.exists():
        return prompts_path

    prompts_path.parent.mkdir(parents=True, exist_ok=True)
    with open(prompts_path, "w", encoding="utf-8") as f:
        json.dump([asdict(p) for p in BUILTIN_PROMPTS], f, indent=2, ensure_ascii=False)
    logger.info("Wrote default prompts to %s", prompts_path)
    return prompts_path


def find_prompt(prompts: list[Prompt], prompt_id: str) -> Prompt:
    for prompt in prompts:
        if prompt.id == prompt_id:
            return prompt
    raise PromptNotFoundError(prompt_id)
