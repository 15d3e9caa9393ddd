# src/todo_store/cli/console.py

from __future__ import annotations

import logging

from ..core.state import AppState
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def run_console_loop(state: AppState) -> None:
    logger.info("Console started.")
    app_name = str(getattr(state.config, "app_name", "todo"))
    print(f"[{app_name}] Use /help for commands, /exit to quit.")

    while True:
        try:
            line = input(f"{app_name}> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not line:
            continue

        if line.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        # Bare text is shorthand for /add.
        if not line.startswith("/"):
            line = f"/add {line}"

        try:
            reply = command_registry.handle(state, line)
        except Exception:
            logger.exception("Command handler crashed.")
            reply = "Internal error while handling a command."

        if reply is not None:
            print(reply)

    logger.info("Console finished.")
