"""Claude CLI backend: runs ``claude -p`` as a subprocess."""

from __future__ import annotations

import asyncio
import contextlib
import logging

from samwise.constants import CLAUDE_CLI_BINARY
from samwise.llm.base import DispatchError, DispatchRequest, ErrorKind, LLMBackend

logger = logging.getLogger(__name__)


def build_cli_input(request: DispatchRequest) -> str:
    """Join the instruction and the text the way the CLI receives them on stdin."""
    if not request.system_prompt:
        return request.user_text
    return f"{request.system_prompt}\n\n{request.user_text}"


class ClaudeCLIBackend(LLMBackend):
    """LLM backend using the locally installed, already authenticated Claude CLI."""

    name = "claude-cli"

    def __init__(self, model: str, binary: str = CLAUDE_CLI_BINARY) -> None:
        self._model = model
        self._binary = binary

    @property
    def command(self) -> list[str]:
        return [self._binary, "-p", "--model", self._model]

    async def generate(self, request: DispatchRequest) -> str:
        payload = build_cli_input(request).encode("utf-8")
        logger.info("Calling Claude CLI (model=%s, %d bytes on stdin)", self._model, len(payload))

        try:
            proc = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise DispatchError(
                ErrorKind.CLI_NOT_FOUND,
                f"Claude CLI '{self._binary}' not found. Make sure it is installed and on PATH.",
            ) from e
        except OSError as e:
            raise DispatchError(ErrorKind.CLI_FAILURE, f"Failed to execute Claude CLI: {e}") from e

        try:
            stdout, stderr = await proc.communicate(payload)
        except asyncio.CancelledError:
            await _terminate(proc)
            raise

        if proc.returncode != 0:
            error = stderr.decode("utf-8", errors="replace").strip()
            logger.error("Claude CLI exited with %s: %s", proc.returncode, error)
            raise DispatchError(
                ErrorKind.CLI_FAILURE,
                f"Claude CLI error (exit code {proc.returncode}): {error or 'no output'}\n\n"
                "Make sure Claude CLI is installed and authenticated.",
            )

        try:
            text = stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DispatchError(
                ErrorKind.CLI_FAILURE, f"Failed to parse Claude CLI output: {e}"
            ) from e

        if not text.strip():
            raise DispatchError(ErrorKind.CLI_FAILURE, "Claude CLI returned an empty response")

        logger.info("Claude CLI response received (%d chars)", len(text))
        return text


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill and reap the subprocess so no orphan outlives the dispatch."""
    if proc.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
    await proc.wait()
    logger.info("Claude CLI process %d terminated", proc.pid)
