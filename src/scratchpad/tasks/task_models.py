# src/scratchpad/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Priority(StrEnum):
    """Task priority. A task may also have no priority at all (None)."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def parse(cls, raw: Any) -> Priority | None:
        """Lenient parse used when reading stored/imported data; unknown -> None."""
        if raw is None or isinstance(raw, Priority):
            return raw
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}

# Tasks without a priority sort after every prioritized task.
NO_PRIORITY_RANK = 3


@dataclass(slots=True, frozen=True)
class Task:
    text: str
    done: bool = False
    priority: Priority | None = None

    def is_valid(self) -> bool:
        return is_valid_text(self.text)

    @property
    def sort_rank(self) -> int:
        return NO_PRIORITY_RANK if self.priority is None else self.priority.rank

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"text": self.text, "done": self.done}
        if self.priority is not None:
            out["priority"] = self.priority.value
        return out

    @classmethod
    def from_dict(cls, data: Any) -> Task | None:
        """
        Build a Task from stored JSON. Returns None for entries that are not
        objects or carry no usable text (they are dropped, never repaired).
        """
        if not isinstance(data, dict):
            return None
        text = data.get("text")
        if not isinstance(text, str) or not is_valid_text(text):
            return None
        return cls(
            text=text,
            done=bool(data.get("done", False)),
            priority=Priority.parse(data.get("priority")),
        )


def is_valid_text(text: Any) -> bool:
    return isinstance(text, str) and bool(text.strip())


def valid_tasks(tasks: list[Task]) -> list[Task]:
    """Drop invalid tasks (empty/whitespace text), keep order."""
    return [t for t in tasks if isinstance(t, Task) and t.is_valid()]


def tasks_to_json(tasks: list[Task]) -> list[dict[str, Any]]:
    return [t.to_dict() for t in valid_tasks(tasks)]


def tasks_from_json(raw: Any) -> list[Task]:
    if not isinstance(raw, list):
        return []
    out: list[Task] = []
    for item in raw:
        task = Task.from_dict(item)
        if task is not None:
            out.append(task)
    return out
