# src/desire_tracker/connectors/console_connector.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..cli.commands import cmd_add, cmd_list
from ..core.state import AppState

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("/exit", "/quit", "/q")


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def handle_line(state: AppState, line: str) -> str | None:
    """
    One REPL step. Returns the text to show, or None for an empty line.

    Slash commands go to the registry; anything else is added as a task.
    """
    if not line.strip():
        return None
    # Only leading whitespace goes; a trailing memo text stays verbatim.
    line = line.lstrip()
    try:
        reply = command_registry.handle(state, line)
        if reply is None:
            reply = cmd_add(state, [], line)
    except Exception:
        logger.exception("Command handler crashed.")
        reply = "Internal error while handling a command."
    return reply


def run_console_loop(state: AppState, *, read: Callable[[str], str] = input) -> None:
    app_name = str(getattr(getattr(state, "settings", None), "app_name", "desire-tracker"))
    logger.info("Console connector started.")
    _print_ts(f"[{app_name}] Type a task to add it. Use /help for commands, /exit to quit.\n")
    print(cmd_list(state, [], ""))

    while True:
        try:
            user_input = read(">>> ")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if user_input.strip().lower() in EXIT_COMMANDS:
            logger.info("Console exit command received.")
            break

        reply = handle_line(state, user_input)
        if reply is not None:
            print(reply)
            print()

    logger.info("Console connector finished.")
