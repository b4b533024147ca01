# src/todo_agenda/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState (restoring the persisted session),
then runs the console REPL.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import start_app
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    # The key/value store uses short-lived sqlite connections per call.
    try:
        kv = getattr(state, "kv", None)
        if kv is not None and hasattr(kv, "close"):
            kv.close()
    except Exception:
        logger.debug("Store close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    log_dir = getattr(settings, "data_dir", ".local/todo")
    setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s...", getattr(settings, "app_name", "todo-agenda"))

    # IMPORTANT: reuse same settings object
    state = start_app(settings=settings)

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info("Console disabled; nothing to run.")
    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
