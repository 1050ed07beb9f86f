# src/scratchpad/core/snapshot.py

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from ..tasks.task_models import Task, tasks_to_json


class StampField(StrEnum):
    """Which timestamp key a serialized snapshot carries."""

    EXPORTED = "exportedAt"
    SYNCED = "syncedAt"
    BACKED_UP = "backedUpAt"


def utc_now() -> datetime:
    return datetime.now(UTC)


def iso_timestamp(when: datetime) -> str:
    """ISO-8601 in UTC with a fixed-width fraction and a 'Z' suffix."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return when.astimezone(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


@dataclass(slots=True, frozen=True)
class Snapshot:
    """Whole-state copy of the scratchpad. Immutable once built."""

    version: str
    timestamp: datetime
    notes: str
    tasks: tuple[Task, ...] = field(default_factory=tuple)

    @classmethod
    def capture(cls, notes: str, tasks: list[Task], *, version: str, when: datetime | None = None) -> Snapshot:
        return cls(version=version, timestamp=when or utc_now(), notes=notes, tasks=tuple(tasks))

    def to_payload(self, stamp: StampField) -> dict[str, Any]:
        return {
            "version": self.version,
            stamp.value: iso_timestamp(self.timestamp),
            "notes": self.notes,
            "tasks": tasks_to_json(list(self.tasks)),
        }

    def to_json(self, stamp: StampField) -> str:
        return json.dumps(self.to_payload(stamp), ensure_ascii=False, indent=2)
