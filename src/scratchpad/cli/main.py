# src/scratchpad/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, starts the background loop
(auto-backup timer, remote sync), then runs the console REPL in the main thread.
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.background import start_background_loop
from ..connectors.console_connector import run_console_loop
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


def _shutdown(state) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    loop = state.loop
    if loop is not None:
        try:
            loop.call(state.backups.shutdown(), timeout=10.0)
        except Exception:
            logger.exception("Failed to stop the backup timer.")

        loop.stop()
        loop.join(timeout=10.0)
        state.loop = None

    try:
        close = getattr(state.kv, "close", None)
        if close is not None:
            close()
    except Exception:
        logger.debug("Key/value store close failed.", exc_info=True)


def main() -> None:
    settings = get_settings()

    console_level = level_from_name(getattr(settings, "log_level", "INFO"))

    log_dir = getattr(settings, "data_dir", ".local/scratchpad")
    log_file = setup_logging(log_dir=log_dir, console_level=console_level)

    logger.info("Starting %s... (log file: %s)", getattr(settings, "app_name", "scratchpad"), log_file)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)
    state.loop = start_background_loop()

    if settings.backup_enabled:
        try:
            state.loop.call(state.backups.enable(settings.backup_interval_minutes * 60), timeout=10.0)
        except Exception:
            logger.exception("Failed to enable auto-backup.")

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
        if not settings.console_enabled:
            signal.signal(signal.SIGINT, _handle_signal)
    except Exception:
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Running auto-backup only. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        _shutdown(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
