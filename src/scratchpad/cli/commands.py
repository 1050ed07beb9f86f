# src/scratchpad/cli/commands.py

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar, cast

from ..core.errors import AuthRequiredError, ImportFormatError, SyncError
from ..core.state import AppState
from ..markup.render import render_markdown
from ..sync.sync_state import RemoteId
from ..tasks.task_models import Priority
from ..tasks.task_ops import TaskFilter, add_task, delete_task, filter_tasks, set_priority, toggle_task
from ..transfer.export_import import export_file, import_file

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

T = TypeVar("T")

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by connectors (/help, /add, /sync, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str, emit: CommandEmitter | None = None) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except Exception:
            nparams = 3

        if nparams >= 3:
            h3 = cast(CommandHandler3, handler)
            return h3(state, args, emit)

        h2 = cast(CommandHandler2, handler)
        return h2(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def run_async(state: AppState, coro: Coroutine[Any, Any, T]) -> T:
    """Run on the app's background loop when there is one (the backup timer lives there)."""
    if state.loop is not None:
        return state.loop.call(coro)
    return asyncio.run(coro)


def _text(args: list[str]) -> str:
    # A typed "\n" is a line break.
    return " ".join(args).replace("\\n", "\n")


def _index(args: list[str]) -> int | None:
    """1-based index as typed by the user -> 0-based, or None."""
    if not args:
        return None
    try:
        n = int(args[0])
    except ValueError:
        return None
    return n - 1 if n >= 1 else None


def _badge_line(state: AppState) -> str:
    badge = state.store.badge()
    return f"Badge: {badge.value} ({badge.tooltip})" if badge else "Badge: (none)"


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    notes, tasks = state.store.snapshot()
    backups = state.backups
    interval = backups.interval_seconds
    auto = f"every {interval / 60:g} min" if interval else "off"
    target = state.sync.status()
    remote = target.document_id if isinstance(target, RemoteId) else "(not linked)"
    return (
        "Status:\n"
        f"  Note: {len(notes)} chars\n"
        f"  Tasks: {len(tasks)} ({state.store.pending_count(tasks)} pending)\n"
        f"  {_badge_line(state)}\n"
        f"  Auto-backup: {auto} -> {backups.backup_dir} ({len(backups.list_backups())} kept)\n"
        f"  Remote document: {remote}"
    )


def cmd_note(state: AppState, args: list[str]) -> str:
    """
    /note        -> show the raw note
    /note <text> -> replace the note
    """
    if not args:
        notes = state.store.get_notes()
        return notes if notes else "(note is empty)"
    state.store.set_notes(_text(args))
    return "Note saved."


def cmd_append(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /append <text>"
    notes = state.store.get_notes()
    line = _text(args)
    state.store.set_notes(f"{notes}\n{line}" if notes else line)
    return "Note updated."


def cmd_preview(state: AppState, args: list[str]) -> str:
    html = render_markdown(state.store.get_notes())
    return html if html else "(note is empty)"


def cmd_tasks(state: AppState, args: list[str]) -> str:
    """
    /tasks [all|pending|completed|high|medium|low] [search words...]
    """
    flt = TaskFilter.ALL
    query_args = args
    if args and args[0].lower() in {f.value for f in TaskFilter}:
        flt = TaskFilter(args[0].lower())
        query_args = args[1:]

    tasks = state.store.get_tasks()
    view = filter_tasks(tasks, flt, " ".join(query_args))
    if not view:
        return "No tasks yet. Add one with /add <text>." if not tasks else "No matching tasks."

    lines = []
    for i, t in view:
        mark = "x" if t.done else " "
        prio = f" ({t.priority.value})" if t.priority else ""
        lines.append(f"{i + 1:>3}. [{mark}] {t.text}{prio}")
    lines.append(_badge_line(state))
    return "\n".join(lines)


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add [!high|!medium|!low|!none] <text>   (default priority: medium)
    """
    priority: Priority | None = Priority.MEDIUM
    if args and args[0].startswith("!"):
        tag = args[0][1:].lower()
        if tag == "none":
            priority = None
        else:
            priority = Priority.parse(tag)
            if priority is None:
                return "Usage: /add [!high|!medium|!low|!none] <text>"
        args = args[1:]

    text = _text(args).strip()
    if not text:
        return "Usage: /add [!high|!medium|!low|!none] <text>"

    stored = state.store.set_tasks(add_task(state.store.get_tasks(), text, priority))
    return f"Added #{len(stored)}: {text}\n{_badge_line(state)}"


def _edit_task(state: AppState, args: list[str], usage: str, edit: Callable[[list, int], list]) -> str:
    idx = _index(args)
    if idx is None:
        return usage
    try:
        updated = edit(state.store.get_tasks(), idx)
    except IndexError:
        return f"No task #{idx + 1}."
    state.store.set_tasks(updated)
    return f"OK.\n{_badge_line(state)}"


def cmd_done(state: AppState, args: list[str]) -> str:
    return _edit_task(state, args, "Usage: /done <number>", toggle_task)


def cmd_del(state: AppState, args: list[str]) -> str:
    return _edit_task(state, args, "Usage: /del <number>", delete_task)


def cmd_prio(state: AppState, args: list[str]) -> str:
    usage = "Usage: /prio <number> high|medium|low (same priority again clears it)"
    if len(args) < 2:
        return usage
    priority = Priority.parse(args[1])
    if priority is None:
        return usage
    return _edit_task(state, args, usage, lambda tasks, i: set_priority(tasks, i, priority))


def cmd_backup(state: AppState, args: list[str]) -> str:
    """
    /backup now             -> write one snapshot
    /backup on [minutes]    -> enable (or reschedule) auto-backup
    /backup off             -> disable auto-backup
    /backup list            -> show kept snapshots
    """
    sub = args[0].lower() if args else "now"
    backups = state.backups

    if sub == "now":
        path = backups.run_once()
        return f"Backup written: {path}" if path else "Backup failed (see log)."

    if sub == "on":
        default_minutes = int(getattr(state.settings, "backup_interval_minutes", 30))
        try:
            minutes = float(args[1]) if len(args) > 1 else float(default_minutes)
        except ValueError:
            return "Usage: /backup on [minutes]"
        if minutes <= 0:
            return "Interval must be positive."
        if state.loop is None:
            return "Auto-backup needs the background loop (run via the scratchpad console)."
        run_async(state, backups.enable(minutes * 60))
        return f"Auto-backup every {minutes:g} min -> {backups.backup_dir}"

    if sub == "off":
        if state.loop is None:
            return "Auto-backup is off."
        run_async(state, backups.disable())
        return "Auto-backup disabled."

    if sub == "list":
        names = backups.list_backups()
        if not names:
            return f"No backups in {backups.backup_dir}."
        return "\n".join([f"Backups in {backups.backup_dir} (newest first):", *(f"  {n}" for n in names)])

    return "Usage: /backup now | on [minutes] | off | list"


def cmd_sync(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    ask = state.confirm
    confirm = (lambda: ask("No GitHub token configured. Sign in now? [y/N] ")) if ask else None

    if emit:
        emit("[SYNC] Contacting remote...")

    try:
        outcome = run_async(state, state.sync.sync(confirm_interactive=confirm))
    except AuthRequiredError as e:
        return f"Not synced: {e.message} Set SCRATCHPAD_GITHUB_TOKEN or sign in."
    except SyncError as e:
        return f"Sync failed: {e.message}"

    where = f" ({outcome.url})" if outcome.url else ""
    return f"Synced ({outcome.action.value}) document {outcome.document_id}{where}."


def cmd_disconnect(state: AppState, args: list[str]) -> str:
    state.sync.disconnect()
    return "Remote document unlinked. The next /sync creates a new one."


def cmd_export(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /export <path.json|path.md|path.txt>"
    version = str(getattr(state.settings, "snapshot_version", "1.0"))
    try:
        path = export_file(state.store, " ".join(args), version=version)
    except OSError as e:
        logger.warning("Export failed: %s", e)
        return f"Export failed: {e}"
    return f"Saved to {path}."


def cmd_import(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /import <path.json|path.md|path.txt>"
    try:
        payload = import_file(state.store, " ".join(args))
    except ImportFormatError as e:
        return f"Import failed: {e}"
    what = "note" if payload.tasks is None else f"note + {len(payload.tasks)} task(s)"
    return f"Imported {what}.\n{_badge_line(state)}"


def cmd_clear(state: AppState, args: list[str]) -> str:
    state.store.clear_all()
    return "Note and tasks cleared."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show note/task counts, backup and sync state.")
registry.register("note", cmd_note, help_text="Show the note, or replace it: /note <text> (\\n = newline).")
registry.register("append", cmd_append, help_text="Append a line to the note.")
registry.register("preview", cmd_preview, help_text="Render the note as markup.")
registry.register("tasks", cmd_tasks, help_text="List tasks: /tasks [all|pending|completed|high|medium|low] [search].")
registry.register("add", cmd_add, help_text="Add a task: /add [!high|!medium|!low|!none] <text>.")
registry.register("done", cmd_done, help_text="Toggle a task done/undone: /done <n>.")
registry.register("del", cmd_del, help_text="Delete a task: /del <n>.", aliases=["rm"])
registry.register("prio", cmd_prio, help_text="Set/clear priority: /prio <n> high|medium|low.")
registry.register("backup", cmd_backup, help_text="Backups: /backup now | on [minutes] | off | list.")
registry.register("sync", cmd_sync, help_text="Push note + tasks to the remote Gist.")
registry.register("disconnect", cmd_disconnect, help_text="Unlink the remote Gist (it is not deleted).")
registry.register("export", cmd_export, help_text="Export: /export <file.json|file.md|file.txt>.")
registry.register("import", cmd_import, help_text="Import: /import <file.json|file.md|file.txt>.")
registry.register("clear", cmd_clear, help_text="Clear the note and all tasks.")
