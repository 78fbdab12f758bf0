"""Application core: wires config, prompts, dispatch and the window controller."""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from samwise.config import AppConfig, ConfigStore
from samwise.constants import SUPPORTED_MODELS
from samwise.errors import ConfigError, SamwiseError
from samwise.events import (
    APP_QUIT,
    LLM_COMPLETE,
    LLM_FAILED,
    LLM_STARTED,
    MODEL_SELECTED,
    SETTINGS_REQUESTED,
    EventBus,
    event_bus,
)
from samwise.input.hotkey import HotkeyRegistrationError
from samwise.llm.base import CancellationToken, DispatchError, DispatchRequest, ErrorKind
from samwise.llm.dispatcher import dispatch
from samwise.llm.resolver import claude_cli_available, resolve
from samwise.prompts import Prompt, find_prompt, load_prompts

if TYPE_CHECKING:
    from samwise.output.clipboard import Clipboard
    from samwise.window import WindowController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelInfo:
    """A selectable model in the model menu."""

    id: str
    label: str
    provider: str


class Samwise:
    """Application core behind the operations the UI can invoke.

    Pipeline: Prompt lookup → Provider resolution → Dispatch → text or error
    """

    def __init__(
        self,
        store: ConfigStore | None = None,
        bus: EventBus | None = None,
        controller: WindowController | None = None,
        clipboard: Clipboard | None = None,
        prompts: list[Prompt] | None = None,
        cli_probe: Callable[[], bool] = claude_cli_available,
    ) -> None:
        self._store = store or ConfigStore()
        self._event_bus = bus or event_bus
        self._controller = controller
        self._clipboard = clipboard
        self._prompts = list(prompts) if prompts is not None else load_prompts()
        self._cli_probe = cli_probe
        self._config = self._store.load()
        self._config_lock = threading.Lock()
        self._inflight: dict[str, CancellationToken] = {}

    @property
    def controller(self) -> WindowController | None:
        return self._controller

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    def start(self) -> None:
        """Register the configured global hotkey, if a controller is attached."""
        if self._controller is None:
            return
        hotkey = self._config.global_hotkey
        try:
            self._controller.start(hotkey)
        except HotkeyRegistrationError:
            logger.exception("Failed to register global shortcut %s", hotkey)

    def stop(self) -> None:
        """Cancel in-flight requests and tear down the hotkey binding."""
        cancelled = self.cancel()
        if cancelled:
            logger.info("Cancelled %d in-flight request(s) on shutdown", cancelled)
        self.quit()

    # -- prompts and models -------------------------------------------------

    def get_prompts(self) -> list[Prompt]:
        return list(self._prompts)

    def get_models(self) -> list[ModelInfo]:
        models = [ModelInfo(*entry) for entry in SUPPORTED_MODELS]
        selected = self._config.selected_model
        if all(m.id != selected for m in models):
            models.append(ModelInfo(selected, selected, "custom"))
        return models

    def select_model(self, model_id: str) -> None:
        """Persist the selected model and notify the UI.

        Raises:
            ConfigError: If the config could not be saved.
        """
        with self._config_lock:
            config = copy.deepcopy(self._config)
            config.selected_model = model_id
            self._save(config)
        logger.info("Selected model: %s", model_id)
        self._event_bus.emit(MODEL_SELECTED, model=model_id)

    # -- configuration ------------------------------------------------------

    def get_config(self) -> AppConfig:
        """Snapshot of the current configuration."""
        return copy.deepcopy(self._config)

    def save_config(self, config: AppConfig) -> None:
        """Persist ``config`` as the new configuration.

        A changed ``global_hotkey`` is re-registered before anything is saved.

        Raises:
            HotkeyRegistrationError: If the new hotkey could not be registered;
                nothing is saved and the previous binding stays active.
            ConfigError: If the config could not be saved; the previous
                binding is restored.
        """
        with self._config_lock:
            self._rebind_and_save(AppConfig.from_dict(config.to_dict()))

    def _rebind_and_save(self, config: AppConfig) -> None:
        old_hotkey = self._config.global_hotkey
        rebind = self._controller is not None and config.global_hotkey != old_hotkey
        if rebind:
            self._controller.update_hotkey(config.global_hotkey)
        try:
            self._save(config)
        except ConfigError:
            if rebind:
                self._restore_hotkey(old_hotkey)
            raise

    def _restore_hotkey(self, hotkey: str) -> None:
        try:
            self._controller.update_hotkey(hotkey)
        except HotkeyRegistrationError:
            logger.exception("Failed to restore global shortcut %s", hotkey)

    def _save(self, config: AppConfig) -> None:
        self._store.save(config)
        self._config = config

    def check_claude_cli(self) -> bool:
        return self._cli_probe()

    # -- dispatch -----------------------------------------------------------

    async def apply_prompt(self, prompt_id: str, text: str, request_id: str | None = None) -> str:
        """Apply a prompt to ``text`` with the selected model.

        Args:
            prompt_id: Id of a prompt from ``get_prompts``.
            text: The text to transform.
            request_id: Caller-chosen id used by ``cancel``; generated if omitted.

        Returns:
            The transformed text.

        Raises:
            PromptNotFoundError: If ``prompt_id`` is unknown.
            DispatchError: If the request failed, timed out or was cancelled.
        """
        prompt = find_prompt(self._prompts, prompt_id)
        config = self.get_config()
        model_id = config.selected_model
        plan = resolve(model_id, config, cli_probe=self._cli_probe)

        request_id = request_id or uuid.uuid4().hex
        if request_id in self._inflight:
            raise ValueError(f"Request id already in flight: {request_id}")
        token = CancellationToken()
        self._inflight[request_id] = token

        logger.info(
            "Applying prompt '%s' to %d chars with %s (%r)", prompt.id, len(text), model_id, plan
        )
        self._event_bus.emit(LLM_STARTED, request_id=request_id, prompt_id=prompt.id, model=model_id)

        request = DispatchRequest(model=model_id, system_prompt=prompt.system_prompt, user_text=text)
        try:
            result = await dispatch(request, plan, token, timeout=config.llm.request_timeout)
        finally:
            self._inflight.pop(request_id, None)

        if result.error is not None:
            error = result.error
            self._event_bus.emit(
                LLM_FAILED, request_id=request_id, kind=error.kind.value, message=error.message
            )
            raise error

        output = result.text or ""
        logger.info("Prompt '%s' applied: %d -> %d chars", prompt.id, len(text), len(output))
        self._event_bus.emit(LLM_COMPLETE, request_id=request_id, text=output)
        return output

    def cancel(self, request_id: str | None = None) -> int:
        """Cancel one in-flight request, or all of them. Returns how many were signalled."""
        if request_id is not None:
            token = self._inflight.get(request_id)
            tokens = [token] if token is not None else []
        else:
            tokens = list(self._inflight.values())
        for token in tokens:
            token.cancel()
        return len(tokens)

    @property
    def inflight(self) -> list[str]:
        return list(self._inflight)

    # -- hotkey and window --------------------------------------------------

    def update_global_shortcut(self, new_hotkey: str) -> None:
        """Re-register the global hotkey and persist it.

        Raises:
            HotkeyRegistrationError: If the new binding could not be registered;
                the previous binding stays active.
            ConfigError: If the config could not be saved; the previous
                binding is restored.
        """
        if self._controller is None:
            raise HotkeyRegistrationError("Global shortcuts are not available in this session")

        with self._config_lock:
            config = copy.deepcopy(self._config)
            config.global_hotkey = new_hotkey
            self._rebind_and_save(config)

    def open_settings(self) -> None:
        self._event_bus.emit(SETTINGS_REQUESTED)

    def show_window(self) -> bool:
        return self._controller.show() if self._controller is not None else False

    def hide_window(self) -> bool:
        return self._controller.hide() if self._controller is not None else False

    def close_window(self) -> None:
        if self._controller is not None:
            self._controller.close_requested()

    def quit(self) -> None:
        if self._controller is not None:
            self._controller.quit()
        else:
            self._event_bus.emit(APP_QUIT)

    def copy_to_clipboard(self, text: str) -> bool:
        if self._clipboard is None:
            logger.error("No clipboard available")
            return False
        return self._clipboard.write(text)


_HINTS = {
    ErrorKind.NOT_CONFIGURED: (
        "- If using Claude: make sure Claude CLI is installed, or add an Anthropic API key\n"
        "- If using OpenAI or AtlasCloud: add your API key in Settings"
    ),
    ErrorKind.UNSUPPORTED_MODEL: "- Pick one of the models from the LLM Models menu",
    ErrorKind.CLI_NOT_FOUND: "- Install Claude CLI and make sure `claude` is on your PATH",
    ErrorKind.CLI_FAILURE: "- Run `claude` in a terminal to check that it is authenticated",
    ErrorKind.NETWORK_FAILURE: "- Check your internet connection and try again",
    ErrorKind.API_FAILURE: "- Check your API key and the selected model in Settings",
    ErrorKind.TIMEOUT: "- The provider took too long; try again or pick a faster model",
}


def format_error(error: SamwiseError, prompt: Prompt | None = None, text: str = "") -> str:
    """Render a failure as readable text for the result area."""
    if isinstance(error, DispatchError) and error.kind is ErrorKind.CANCELLED:
        return "Operation cancelled by user."

    lines = [f"[Error: {error}]"]
    if prompt is not None:
        lines += ["", f"Applied: {prompt.name}"]
    if text:
        lines += ["", "Original text:", text]
    hint = _HINTS.get(error.kind) if isinstance(error, DispatchError) else None
    if hint:
        lines += ["", "To fix this:", hint]
    return "\n".join(lines)
