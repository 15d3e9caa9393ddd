# src/todo_store/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then either runs one command given on the
command line (`todo-store /add Buy milk`) or starts the console REPL.
"""

from __future__ import annotations

import logging
import sys

from ..cli.bootstrap import create_initial_state
from ..config import get_config
from ..logging_setup import setup_logging
from .commands import registry as command_registry
from .console import run_console_loop

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    config = get_config()
    argv = sys.argv[1:] if argv is None else argv

    console_level = getattr(logging, str(config.log_level).upper(), logging.WARNING)
    setup_logging(log_dir=config.data_dir, console_level=console_level)

    logger.info("Starting %s...", config.app_name)
    state = create_initial_state(config=config)

    if argv:
        line = " ".join(argv)
        if not line.startswith("/"):
            line = "/" + line
        try:
            reply = command_registry.handle(state, line)
        except Exception:
            logger.exception("Command handler crashed.")
            print("Internal error while handling a command.", file=sys.stderr)
            return 1
        print(reply)
        return 0

    run_console_loop(state)
    logger.info("Bye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
