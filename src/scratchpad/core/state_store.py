# src/scratchpad/core/state_store.py

"""
State store: the single source of truth for the Note and the Task list.

Both values live in the host key/value store. Every read returns a fresh copy,
every write replaces a value wholesale, and one lock covers reads and writes so
nobody (e.g. the backup timer) observes a half-applied clear/import.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from ..tasks.task_models import Task, tasks_from_json, tasks_to_json, valid_tasks
from .ports import KeyValueStore

logger = logging.getLogger(__name__)

NOTES_KEY = "notepadContent"
TASKS_KEY = "todoList"


@dataclass(slots=True, frozen=True)
class Badge:
    value: int
    tooltip: str


def pending_count(tasks: list[Task]) -> int:
    """Valid tasks that are not done."""
    return sum(1 for t in valid_tasks(tasks) if not t.done)


def badge_for(tasks: list[Task]) -> Badge | None:
    """None means "clear the badge"; a zero badge is never shown."""
    n = pending_count(tasks)
    if n <= 0:
        return None
    return Badge(value=n, tooltip=f"{n} pending task(s)")


class ScratchpadStore:
    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        self._lock = threading.RLock()

    # ---- reads ----

    def get_notes(self) -> str:
        with self._lock:
            raw = self._kv.get(NOTES_KEY, "")
        return raw if isinstance(raw, str) else ""

    def get_tasks(self) -> list[Task]:
        with self._lock:
            raw = self._kv.get(TASKS_KEY, [])
        return tasks_from_json(raw)

    def snapshot(self) -> tuple[str, list[Task]]:
        """Notes and tasks read under one lock (consistent pair)."""
        with self._lock:
            return self.get_notes(), self.get_tasks()

    # ---- writes ----

    def set_notes(self, text: str) -> None:
        with self._lock:
            self._kv.set(NOTES_KEY, str(text))

    def set_tasks(self, tasks: list[Task]) -> list[Task]:
        """Drop invalid tasks, then replace the list. Returns what was stored."""
        clean = valid_tasks(list(tasks))
        dropped = len(tasks) - len(clean)
        if dropped:
            logger.debug("set_tasks dropped %d invalid task(s)", dropped)
        with self._lock:
            self._kv.set(TASKS_KEY, tasks_to_json(clean))
        return clean

    def replace_all(self, notes: str, tasks: list[Task]) -> None:
        with self._lock:
            self.set_notes(notes)
            self.set_tasks(tasks)

    def clear_all(self) -> None:
        with self._lock:
            self._kv.set(NOTES_KEY, "")
            self._kv.set(TASKS_KEY, [])
        logger.info("Scratchpad cleared.")

    # ---- derived ----

    def pending_count(self, tasks: list[Task] | None = None) -> int:
        return pending_count(self.get_tasks() if tasks is None else tasks)

    def badge(self, tasks: list[Task] | None = None) -> Badge | None:
        return badge_for(self.get_tasks() if tasks is None else tasks)
