"""Execute one dispatch request against a resolved provider plan.

The dispatcher owns the uniform part of every call: choosing the execution
strategy from the plan, bounding it with a wall-clock timeout, racing it
against the request's cancellation token, and mapping every failure into a
:class:`DispatchResult`. No call is ever retried.
"""

from __future__ import annotations

import asyncio
import logging

from samwise.constants import DISPATCH_TIMEOUT
from samwise.llm.anthropic_llm import AnthropicLLMBackend
from samwise.llm.base import (
    CancellationToken,
    DispatchError,
    DispatchRequest,
    DispatchResult,
    ErrorKind,
    LLMBackend,
)
from samwise.llm.claude_cli import ClaudeCLIBackend
from samwise.llm.openai_llm import AtlasCloudLLMBackend, OpenAILLMBackend
from samwise.llm.resolver import ProviderFamily, ProviderPlan, Route

logger = logging.getLogger(__name__)


def create_backend(plan: ProviderPlan, timeout: float = DISPATCH_TIMEOUT) -> LLMBackend:
    """Factory: the execution strategy for a configured plan."""
    if plan.route is Route.CLI:
        return ClaudeCLIBackend(model=plan.model)
    api_kwargs = {"max_tokens": plan.max_tokens, "timeout": timeout}
    if plan.route is Route.ANTHROPIC_API:
        return AnthropicLLMBackend(plan.api_key or "", plan.model, **api_kwargs)
    if plan.route is Route.OPENAI_API:
        return OpenAILLMBackend(plan.api_key or "", plan.model, **api_kwargs)
    if plan.route is Route.ATLASCLOUD_API:
        return AtlasCloudLLMBackend(plan.api_key or "", plan.model, **api_kwargs)
    raise ValueError(f"No backend for unconfigured plan: {plan!r}")


async def dispatch(
    request: DispatchRequest,
    plan: ProviderPlan,
    token: CancellationToken | None = None,
    timeout: float | None = None,
    backend: LLMBackend | None = None,
) -> DispatchResult:
    """Run ``request`` against ``plan``.

    Args:
        request: The text transformation to run.
        plan: Output of :func:`samwise.llm.resolver.resolve`.
        token: Cancellation signal owned by the caller; a cancelled dispatch
            never yields text.
        timeout: Wall-clock bound in seconds (default ``DISPATCH_TIMEOUT``).
        backend: Overrides the strategy chosen from the plan.

    Returns:
        ``DispatchResult`` with either the text or a ``DispatchError``.
    """
    if plan.family is ProviderFamily.UNSUPPORTED:
        return DispatchResult.failure(
            ErrorKind.UNSUPPORTED_MODEL, plan.reason or f"Unsupported model: {plan.model}"
        )
    if not plan.configured:
        return DispatchResult.failure(
            ErrorKind.NOT_CONFIGURED, plan.reason or "Provider not configured"
        )

    token = token or CancellationToken()
    if token.cancelled:
        return DispatchResult.failure(ErrorKind.CANCELLED, "Operation cancelled")

    timeout = DISPATCH_TIMEOUT if timeout is None else timeout
    backend = backend or create_backend(plan, timeout=timeout)
    logger.info("Dispatching to %s (%r, timeout=%.0fs)", backend.name, plan, timeout)

    work = asyncio.ensure_future(backend.generate(request))
    cancelled = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait(
            {work, cancelled}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
        )
    finally:
        # Also runs when the caller's own task is cancelled
        cancelled.cancel()
        if not work.done():
            work.cancel()
            await asyncio.gather(work, return_exceptions=True)

    if work in done and not work.cancelled():
        error = work.exception()
        if error is None:
            if token.cancelled:
                # Cancel raced a completed call: the text is discarded
                return DispatchResult.failure(ErrorKind.CANCELLED, "Operation cancelled")
            return DispatchResult.success(work.result())
        if isinstance(error, DispatchError):
            logger.warning("Dispatch failed (%s): %s", error.kind.name, error.message)
            return DispatchResult(error=error)
        logger.error("Unexpected dispatch failure", exc_info=error)
        return DispatchResult.failure(ErrorKind.PROTOCOL_FAILURE, f"Unexpected error: {error}")

    if cancelled in done:
        logger.info("Dispatch cancelled by caller")
        return DispatchResult.failure(ErrorKind.CANCELLED, "Operation cancelled")

    logger.warning("Dispatch timed out after %.0fs", timeout)
    return DispatchResult.failure(
        ErrorKind.TIMEOUT, f"Request timed out after {timeout:.0f} seconds"
    )
