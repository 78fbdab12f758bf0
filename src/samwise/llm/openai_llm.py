"""OpenAI-compatible chat completions backend (OpenAI and AtlasCloud)."""

from __future__ import annotations

import logging
from typing import Any

import openai

from samwise.constants import ATLASCLOUD_BASE_URL, DISPATCH_TIMEOUT, OPENAI_MAX_TOKENS
from samwise.llm.base import DispatchError, DispatchRequest, ErrorKind, LLMBackend

logger = logging.getLogger(__name__)

# Models the gateway only serves with these parameters
_ATLASCLOUD_MODEL_OPTIONS: dict[str, dict[str, Any]] = {
    "openai/gpt-5.1": {
        "max_tokens": 128000,
        "temperature": 1.0,
        "extra_body": {"repetition_penalty": 1.1},
    },
}


class OpenAILLMBackend(LLMBackend):
    """LLM backend using an OpenAI-compatible chat completions endpoint."""

    name = "openai"
    label = "OpenAI"

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int = OPENAI_MAX_TOKENS,
        timeout: float = DISPATCH_TIMEOUT,
        base_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._timeout = timeout
        self._base_url = base_url
        self._client = client

    def build_messages(self, request: DispatchRequest) -> list[dict[str, str]]:
        messages = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.user_text})
        return messages

    def request_options(self) -> dict[str, Any]:
        """Sampling parameters sent with every request."""
        return {"max_tokens": self._max_tokens, "temperature": 0.7}

    async def generate(self, request: DispatchRequest) -> str:
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": self.build_messages(request),
            **self.request_options(),
        }

        logger.info(
            "Calling %s API (model=%s, system=%d chars, user=%d chars)",
            self.label,
            self._model,
            len(request.system_prompt),
            len(request.user_text),
        )

        try:
            if self._client is not None:
                response = await self._client.chat.completions.create(**kwargs)
            else:
                async with openai.AsyncOpenAI(
                    api_key=self._api_key,
                    base_url=self._base_url,
                    max_retries=0,
                    timeout=self._timeout,
                ) as client:
                    response = await client.chat.completions.create(**kwargs)
        except openai.APITimeoutError as e:
            raise DispatchError(ErrorKind.TIMEOUT, f"{self.label} API request timed out") from e
        except openai.APIConnectionError as e:
            raise DispatchError(ErrorKind.NETWORK_FAILURE, f"HTTP request failed: {e}") from e
        except openai.APIStatusError as e:
            body = e.response.text
            logger.error("%s API error %s: %s", self.label, e.status_code, body)
            raise DispatchError(
                ErrorKind.API_FAILURE,
                self.describe_status_error(e.status_code, body),
                status=e.status_code,
                body=body,
            ) from e
        except openai.APIResponseValidationError as e:
            raise DispatchError(
                ErrorKind.PROTOCOL_FAILURE, f"Unexpected {self.label} response: {e}"
            ) from e

        text = self.extract_text(_as_dict(response))
        logger.info("%s response received (%d chars)", self.label, len(text))
        return text

    def describe_status_error(self, status: int, body: str) -> str:
        return f"{self.label} API error ({status}): {body}"

    def extract_text(self, data: dict[str, Any]) -> str:
        """Return ``choices[0].message.content`` or fail with PROTOCOL_FAILURE."""
        text = _choice_content(data)
        if text is None:
            raise DispatchError(
                ErrorKind.PROTOCOL_FAILURE, f"Unexpected response format. Response: {data!r}"
            )
        return text


class AtlasCloudLLMBackend(OpenAILLMBackend):
    """AtlasCloud's OpenAI-compatible gateway for vendor-qualified model ids."""

    name = "atlascloud"
    label = "AtlasCloud"

    def __init__(self, api_key: str, model: str, **kwargs: Any) -> None:
        kwargs.setdefault("base_url", ATLASCLOUD_BASE_URL)
        super().__init__(api_key, model, **kwargs)

    def request_options(self) -> dict[str, Any]:
        options = super().request_options()
        options.update(_ATLASCLOUD_MODEL_OPTIONS.get(self._model, {}))
        return options

    def describe_status_error(self, status: int, body: str) -> str:
        lowered = body.lower()
        if "not found" in lowered or "bad request" in lowered:
            return (
                f"AtlasCloud API error ({status}): {body}\nModel: {self._model}\n"
                "The model may not be available on AtlasCloud; try another one "
                "such as 'google/gemini-2.5-flash'."
            )
        return super().describe_status_error(status, body)

    def extract_text(self, data: dict[str, Any]) -> str:
        # AtlasCloud answers some models in a responses-style shape
        text = _choice_content(data)
        if text is None:
            text = _output_content(data)
        if text is None:
            text = _direct_content(data)
        if text is None:
            raise DispatchError(
                ErrorKind.PROTOCOL_FAILURE, f"Unexpected response format. Response: {data!r}"
            )
        return text


def _as_dict(response: Any) -> dict[str, Any]:
    if isinstance(response, dict):
        return response
    to_dict = getattr(response, "to_dict", None)
    if callable(to_dict):
        data = to_dict()
        if isinstance(data, dict):
            return data
    raise DispatchError(
        ErrorKind.PROTOCOL_FAILURE, f"Unexpected response type: {type(response).__name__}"
    )


def _choice_content(data: dict[str, Any]) -> str | None:
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else None


def _output_content(data: dict[str, Any]) -> str | None:
    output = data.get("output")
    if not isinstance(output, list) or not output or not isinstance(output[0], dict):
        return None
    content = output[0].get("content")
    if not isinstance(content, list) or not content or not isinstance(content[0], dict):
        return None
    text = content[0].get("text")
    return text if isinstance(text, str) else None


def _direct_content(data: dict[str, Any]) -> str | None:
    value = data.get("text", data.get("content"))
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        inner = value.get("content", value.get("text"))
        return inner if isinstance(inner, str) else None
    return None
