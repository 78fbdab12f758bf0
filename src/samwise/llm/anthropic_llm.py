"""Anthropic Messages API backend."""

from __future__ import annotations

import logging
from typing import Any

import anthropic

from samwise.constants import ANTHROPIC_MAX_TOKENS, DISPATCH_TIMEOUT
from samwise.llm.base import DispatchError, DispatchRequest, ErrorKind, LLMBackend

logger = logging.getLogger(__name__)


class AnthropicLLMBackend(LLMBackend):
    """LLM backend using the Anthropic API (Claude Sonnet, Haiku, etc.)."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = ANTHROPIC_MAX_TOKENS,
        timeout: float = DISPATCH_TIMEOUT,
        client: Any | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._client = client

    async def generate(self, request: DispatchRequest) -> str:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "max_tokens": self._max_tokens,
            "messages": [{"role": "user", "content": request.user_text}],
        }
        if request.system_prompt:
            kwargs["system"] = request.system_prompt

        logger.info(
            "Calling Anthropic API (model=%s, system=%d chars, user=%d chars)",
            self._model,
            len(request.system_prompt),
            len(request.user_text),
        )

        try:
            if self._client is not None:
                response = await self._client.messages.create(**kwargs)
            else:
                # Retries are disabled: one attempt per dispatch
                async with anthropic.AsyncAnthropic(
                    api_key=self._api_key, max_retries=0, timeout=self._timeout
                ) as client:
                    response = await client.messages.create(**kwargs)
        except anthropic.APITimeoutError as e:
            raise DispatchError(ErrorKind.TIMEOUT, "Anthropic API request timed out") from e
        except anthropic.APIConnectionError as e:
            raise DispatchError(ErrorKind.NETWORK_FAILURE, f"HTTP request failed: {e}") from e
        except anthropic.APIStatusError as e:
            body = e.response.text
            logger.error("Anthropic API error %s: %s", e.status_code, body)
            raise DispatchError(
                ErrorKind.API_FAILURE,
                f"Anthropic API error ({e.status_code}): {body}",
                status=e.status_code,
                body=body,
            ) from e
        except anthropic.APIResponseValidationError as e:
            raise DispatchError(
                ErrorKind.PROTOCOL_FAILURE, f"Unexpected Anthropic response: {e}"
            ) from e

        text = _extract_text(response)
        logger.info("Anthropic response received (%d chars)", len(text))
        return text


def _extract_text(response: Any) -> str:
    """Concatenate the text blocks of a Messages API response."""
    blocks = getattr(response, "content", None)
    if not isinstance(blocks, list):
        raise DispatchError(
            ErrorKind.PROTOCOL_FAILURE, f"Unexpected response format. Response: {response!r}"
        )

    parts = [block.text for block in blocks if isinstance(getattr(block, "text", None), str)]
    if not parts:
        raise DispatchError(
            ErrorKind.PROTOCOL_FAILURE, "Unexpected response format: no text content"
        )
    return "".join(parts)
