"""Entry point: python -m samwise"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from samwise import __version__
from samwise.constants import API_DEFAULT_PORT, CONFIG_DIR, LOG_FORMAT

if TYPE_CHECKING:
    from samwise.app import Samwise
    from samwise.config import ConfigStore


def setup_logging(verbose: bool = False) -> None:
    """Configure logging with the rich handler."""
    from rich.logging import RichHandler

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def setup_plain_logging(verbose: bool = False) -> None:
    """Log to stderr without markup; used by the one-shot commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def ensure_directories() -> None:
    """Create application directories if they don't exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="samwise",
        description="Apply AI writing prompts to your text from a global shortcut",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--version", action="version", version=f"samwise {__version__}"
    )
    parser.add_argument(
        "--config", type=str, default=None, help="Path to config file"
    )
    parser.add_argument(
        "--port", type=int, default=API_DEFAULT_PORT, help="Port for the local UI API"
    )
    parser.add_argument(
        "--list-prompts", action="store_true", help="List available prompts and exit"
    )
    parser.add_argument(
        "--list-models", action="store_true", help="List selectable models and exit"
    )
    parser.add_argument(
        "--check-cli", action="store_true", help="Report whether Claude CLI is installed and exit"
    )
    parser.add_argument(
        "--apply",
        metavar="PROMPT_ID",
        default=None,
        help="Apply a prompt to text read from stdin, print the result and exit",
    )
    return parser.parse_args(argv)


def cmd_list_prompts(core: Samwise) -> None:
    """Print the prompt catalog."""
    for p in core.get_prompts():
        print(f"  {p.icon or ' '} {p.id:<16} {p.name:<20} {p.description}")


def cmd_list_models(core: Samwise) -> None:
    """Print selectable models, marking the active one."""
    selected = core.get_config().selected_model
    for m in core.get_models():
        marker = " *" if m.id == selected else ""
        print(f"  {m.id:<36} {m.label:<32} {m.provider}{marker}")


def cmd_check_cli(core: Samwise) -> int:
    if core.check_claude_cli():
        print("Claude CLI is installed")
        return 0
    print("Claude CLI not found on PATH")
    return 1


def cmd_apply(core: Samwise, prompt_id: str) -> int:
    """Apply a prompt to stdin and print the result. Returns the exit code."""
    from samwise.app import format_error
    from samwise.errors import PromptNotFoundError
    from samwise.llm.base import DispatchError

    text = sys.stdin.read()
    try:
        result = asyncio.run(core.apply_prompt(prompt_id, text))
    except PromptNotFoundError as e:
        print(format_error(e), file=sys.stderr)
        return 1
    except DispatchError as e:
        prompt = next((p for p in core.get_prompts() if p.id == prompt_id), None)
        print(format_error(e, prompt), file=sys.stderr)
        return 1
    sys.stdout.write(result)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    one_shot = args.list_prompts or args.list_models or args.check_cli or args.apply is not None
    if one_shot:
        setup_plain_logging(verbose=args.verbose)
    else:
        setup_logging(verbose=args.verbose)
    ensure_directories()

    logger = logging.getLogger("samwise")

    from samwise.app import Samwise
    from samwise.config import ConfigStore

    store = ConfigStore(Path(args.config) if args.config else None)

    # Handle info commands that exit immediately
    if one_shot:
        core = Samwise(store=store)
        if args.list_prompts:
            cmd_list_prompts(core)
        elif args.list_models:
            cmd_list_models(core)
        elif args.check_cli:
            sys.exit(cmd_check_cli(core))
        else:
            sys.exit(cmd_apply(core, args.apply))
        return

    logger.info("Samwise v%s starting...", __version__)

    try:
        asyncio.run(_serve(store, args.port))
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


async def _serve(store: ConfigStore, port: int) -> None:
    """Run the hotkey controller and the local API on one event loop."""
    from samwise.app import Samwise
    from samwise.events import APP_QUIT, event_bus
    from samwise.input.hotkey import create_hotkey_backend
    from samwise.output.clipboard import Clipboard
    from samwise.platform.detect import detect_platform
    from samwise.web.server import create_server
    from samwise.window import WindowController

    logger = logging.getLogger("samwise")
    event_bus.set_loop(asyncio.get_running_loop())

    platform = detect_platform()
    logger.info("Platform: %s", platform.display_server.value)
    clipboard = Clipboard(platform)

    controller: WindowController | None = None
    try:
        controller = WindowController(event_bus, create_hotkey_backend(platform), clipboard)
    except RuntimeError:
        logger.warning("No hotkey backend available; the global shortcut is disabled")

    core = Samwise(store=store, bus=event_bus, controller=controller, clipboard=clipboard)
    server = create_server(core, port=port)

    def _on_quit() -> None:
        server.should_exit = True

    event_bus.on(APP_QUIT, _on_quit)
    core.start()
    logger.info("Samwise is running. Press Ctrl+C to stop.")
    try:
        await server.serve()
    finally:
        event_bus.off(APP_QUIT, _on_quit)
        core.stop()


if __name__ == "__main__":
    main()
