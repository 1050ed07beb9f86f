# src/scratchpad/tasks/task_ops.py

"""
Task list edits and display views.

Edits return a new list (stored order preserved); the caller persists it through
ScratchpadStore.set_tasks. Views never mutate: sorting is display-only.
"""

from __future__ import annotations

from dataclasses import replace
from enum import StrEnum

from .task_models import Priority, Task


class TaskFilter(StrEnum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def add_task(tasks: list[Task], text: str, priority: Priority | None = Priority.MEDIUM) -> list[Task]:
    text = (text or "").strip()
    if not text:
        return list(tasks)
    return [*tasks, Task(text=text, done=False, priority=priority)]


def _check_index(tasks: list[Task], index: int) -> None:
    if not 0 <= index < len(tasks):
        raise IndexError(f"task index out of range: {index}")


def toggle_task(tasks: list[Task], index: int) -> list[Task]:
    _check_index(tasks, index)
    out = list(tasks)
    out[index] = replace(out[index], done=not out[index].done)
    return out


def delete_task(tasks: list[Task], index: int) -> list[Task]:
    _check_index(tasks, index)
    return tasks[:index] + tasks[index + 1:]


def set_priority(tasks: list[Task], index: int, priority: Priority | None) -> list[Task]:
    """Setting the priority a task already has clears it."""
    _check_index(tasks, index)
    out = list(tasks)
    current = out[index].priority
    out[index] = replace(out[index], priority=None if current == priority else priority)
    return out


def _matches(task: Task, status_filter: TaskFilter, query: str) -> bool:
    if query and query not in task.text.lower():
        return False
    if status_filter == TaskFilter.PENDING:
        return not task.done
    if status_filter == TaskFilter.COMPLETED:
        return task.done
    if status_filter in (TaskFilter.HIGH, TaskFilter.MEDIUM, TaskFilter.LOW):
        return task.priority == Priority(status_filter.value)
    return True


def filter_tasks(
    tasks: list[Task],
    status_filter: TaskFilter | str = TaskFilter.ALL,
    query: str = "",
) -> list[tuple[int, Task]]:
    """
    Display view: (stored_index, task) pairs, filtered then sorted by priority
    (high, medium, low, none). The sort is stable, so ties keep stored order.
    """
    flt = TaskFilter(status_filter)
    q = (query or "").strip().lower()
    picked = [(i, t) for i, t in enumerate(tasks) if t.is_valid() and _matches(t, flt, q)]
    return sorted(picked, key=lambda pair: pair[1].sort_rank)
