"""Shared types for the LLM dispatch layer."""

from __future__ import annotations

import abc
import asyncio
from dataclasses import dataclass
from enum import Enum

from samwise.errors import SamwiseError


class ErrorKind(Enum):
    """Uniform failure categories across all providers."""

    NOT_CONFIGURED = "not_configured"
    UNSUPPORTED_MODEL = "unsupported_model"
    CLI_NOT_FOUND = "cli_not_found"
    CLI_FAILURE = "cli_failure"
    NETWORK_FAILURE = "network_failure"
    API_FAILURE = "api_failure"
    PROTOCOL_FAILURE = "protocol_failure"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


class DispatchError(SamwiseError):
    """A failed dispatch. ``status`` and ``body`` are set for API_FAILURE only."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.status = status
        self.body = body
        super().__init__(message)

    def __repr__(self) -> str:
        return f"DispatchError({self.kind.name}, {self.message!r})"


@dataclass(frozen=True)
class DispatchRequest:
    """One text transformation to run."""

    model: str
    system_prompt: str
    user_text: str


@dataclass(frozen=True)
class DispatchResult:
    """Either the transformed text or the error that prevented it."""

    text: str | None = None
    error: DispatchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, text: str) -> DispatchResult:
        return cls(text=text)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, **kwargs: object) -> DispatchResult:
        return cls(error=DispatchError(kind, message, **kwargs))  # type: ignore[arg-type]


class CancellationToken:
    """Per-request cancellation signal.

    ``cancel`` may be called from any thread; waiters are woken on the loop
    the token was first awaited on.
    """

    def __init__(self) -> None:
        self._cancelled = False
        self._event: asyncio.Event | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        if self._event is None or self._loop is None:
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._event.set()
        elif not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._event.set)

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        if self._event is None:
            self._loop = asyncio.get_running_loop()
            self._event = asyncio.Event()
        if self._cancelled:
            return
        await self._event.wait()


class LLMBackend(abc.ABC):
    """One execution strategy for a dispatch (subprocess or HTTP)."""

    name = "backend"

    @abc.abstractmethod
    async def generate(self, request: DispatchRequest) -> str:
        """Run the request and return the transformed text.

        Raises:
            DispatchError: On any provider, transport or protocol failure.
            asyncio.CancelledError: When the dispatcher tears the call down;
                implementations must release their subprocess or connection.
        """
        ...
