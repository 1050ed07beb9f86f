# src/scratchpad/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except Exception:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}")


def console_confirm(question: str) -> bool:
    """y/N prompt on the terminal. EOF/Ctrl+C count as "no"."""
    try:
        answer = input(f"[{_ts_local()}] {question}").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer in ("y", "yes")


def append_line(state: AppState, line: str) -> None:
    notes = state.store.get_notes()
    state.store.set_notes(f"{notes}\n{line}" if notes else line)


def _prompt(state: AppState) -> str:
    """Prompt carries the pending-task count when there is one."""
    badge = state.store.badge()
    return f"[{badge.value}] >>> " if badge else ">>> "


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Plain lines are appended to the note. Use /help for commands. Use /exit to quit.\n")

    if state.confirm is None:
        state.confirm = console_confirm

    def emit(text: str) -> None:
        # Immediate user-visible feedback for long operations (e.g., remote sync)
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            prompt = _prompt(state)
            user_input = input(prompt).strip()
            _rewrite_prev_line(f"[{_ts_local()}] {prompt}{user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            print(f"[{_ts_local()}] {cmd_response}")
            continue

        try:
            append_line(state, user_input)
        except Exception:
            logger.exception("Failed to append to the note.")
            _print_ts("Internal error while saving the note.")
            continue

        _print_ts(f"(noted, {len(state.store.get_notes())} chars)")

    logger.info("Console connector finished.")
