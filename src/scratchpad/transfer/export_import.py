# src/scratchpad/transfer/export_import.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

from ..core.errors import ImportFormatError
from ..core.snapshot import Snapshot, StampField
from ..core.state_store import ScratchpadStore
from ..tasks.task_models import Priority, Task, valid_tasks

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ImportPayload:
    notes: str
    # None: payload carried notes only (plain text import), tasks stay as they are.
    tasks: list[Task] | None = None


def export_json(notes: str, tasks: list[Task], *, version: str = "1.0", when: datetime | None = None) -> str:
    return Snapshot.capture(notes, tasks, version=version, when=when).to_json(StampField.EXPORTED)


def export_text(notes: str, tasks: list[Task], *, today: date | None = None) -> str:
    """Human-readable report (the .md/.txt export)."""
    today = today or date.today()
    lines = [
        f"=== SCRATCHPAD - {today.isoformat()} ===",
        "",
        "--- NOTES ---",
        notes or "(empty)",
        "",
        "--- TASKS ---",
    ]

    clean = valid_tasks(tasks)
    if not clean:
        lines.append("(no tasks)")
    for t in clean:
        mark = "x" if t.done else " "
        prio = f"[{t.priority.value.upper()}] " if t.priority else ""
        lines.append(f"[{mark}] {prio}{t.text}")

    return "\n".join(lines) + "\n"


def _parse_task(item: Any, pos: int) -> Task | None:
    if not isinstance(item, dict):
        raise ImportFormatError(f"tasks[{pos}] is not an object")

    text = item.get("text")
    if not isinstance(text, str):
        raise ImportFormatError(f"tasks[{pos}].text must be a string")

    done = item.get("done", False)
    if not isinstance(done, bool):
        raise ImportFormatError(f"tasks[{pos}].done must be true/false")

    raw_prio = item.get("priority")
    priority = Priority.parse(raw_prio)
    if raw_prio is not None and priority is None:
        raise ImportFormatError(f"tasks[{pos}].priority must be high, medium or low")

    if not text.strip():
        # Same rule as every other write path: drop, don't reject.
        return None
    return Task(text=text, done=done, priority=priority)


def parse_json_payload(raw: str) -> ImportPayload:
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise ImportFormatError(f"invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ImportFormatError("payload must be a JSON object")

    notes = data.get("notes", "")
    if not isinstance(notes, str):
        raise ImportFormatError("notes must be a string")

    raw_tasks = data.get("tasks", [])
    if not isinstance(raw_tasks, list):
        raise ImportFormatError("tasks must be a list")

    tasks = [t for t in (_parse_task(item, i) for i, item in enumerate(raw_tasks)) if t is not None]
    return ImportPayload(notes=notes, tasks=tasks)


def parse_import(raw: str, filename: str | Path = "") -> ImportPayload:
    """
    .json -> full payload (validated as a whole before anything is applied).
    Anything else (.txt, .md) -> replaces the note only.
    """
    if Path(filename).suffix.lower() == ".json":
        return parse_json_payload(raw)
    return ImportPayload(notes=raw, tasks=None)


def apply_import(store: ScratchpadStore, payload: ImportPayload) -> None:
    if payload.tasks is None:
        store.set_notes(payload.notes)
        logger.info("Imported note text (%d chars).", len(payload.notes))
        return
    store.replace_all(payload.notes, payload.tasks)
    logger.info("Imported note + %d task(s).", len(payload.tasks))


def import_file(store: ScratchpadStore, path: str | Path) -> ImportPayload:
    """Read, validate, then apply. On any error the store is left untouched."""
    path = Path(path)
    try:
        raw = path.read_text("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ImportFormatError(f"cannot read {path}: {e}") from e
    payload = parse_import(raw, path.name)
    apply_import(store, payload)
    return payload


def export_file(store: ScratchpadStore, path: str | Path, *, version: str = "1.0") -> Path:
    """Write .json as a snapshot payload, anything else as the text report."""
    path = Path(path)
    notes, tasks = store.snapshot()
    if path.suffix.lower() == ".json":
        content = export_json(notes, tasks, version=version)
    else:
        content = export_text(notes, tasks)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, "utf-8")
    logger.info("Exported scratchpad to %s", path)
    return path
