# src/scratchpad/backup/scheduler.py

"""
Auto-backup scheduler.

Owns one repeating asyncio timer per store. Every tick writes a whole-state
snapshot to the backup directory and prunes old files down to the retention cap.

Contract:
- best effort: a failed backup is logged and swallowed, the next tick is the retry;
- enable() on a running scheduler cancels the old timer and starts the new one in
  the same loop step, so two timers never tick at once;
- once disable() returns, no further snapshot file is written.

To use from another thread, run enable()/disable() on the scheduler's loop.
"""

from __future__ import annotations

import asyncio
import logging
import re
import threading
from collections.abc import Callable
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from ..core.ports import FileSystem
from ..core.snapshot import Snapshot, StampField, iso_timestamp, utc_now
from ..core.state_store import ScratchpadStore

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = 10

BACKUP_PREFIX = "backup-"
BACKUP_SUFFIX = ".json"
_BACKUP_NAME_RE = re.compile(r"^backup-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{6}Z\.json$")


class SchedulerState(StrEnum):
    DISABLED = "disabled"
    ENABLED = "enabled"


def backup_filename(when: datetime) -> str:
    """Timestamp-derived name; lexicographic order == chronological order."""
    stamp = iso_timestamp(when).replace(":", "-").replace(".", "-")
    return f"{BACKUP_PREFIX}{stamp}{BACKUP_SUFFIX}"


def is_backup_filename(name: str) -> bool:
    return bool(_BACKUP_NAME_RE.match(name))


class BackupScheduler:
    def __init__(
        self,
        store: ScratchpadStore,
        fs: FileSystem,
        *,
        backup_dir: str | Path,
        retention: int = DEFAULT_RETENTION,
        version: str = "1.0",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if retention < 1:
            raise ValueError("retention must be >= 1")
        self._store = store
        self._fs = fs
        self._backup_dir = Path(backup_dir)
        self._retention = int(retention)
        self._version = version
        self._clock = clock

        self._timer: asyncio.Task[None] | None = None
        self._interval_s: float | None = None
        self._write_lock = threading.Lock()

    @property
    def state(self) -> SchedulerState:
        if self._timer is not None and not self._timer.done():
            return SchedulerState.ENABLED
        return SchedulerState.DISABLED

    @property
    def interval_seconds(self) -> float | None:
        return self._interval_s if self.state == SchedulerState.ENABLED else None

    @property
    def backup_dir(self) -> Path:
        return self._backup_dir

    # ---- timer lifecycle ----

    async def enable(self, interval_seconds: float) -> None:
        interval = float(interval_seconds)
        if interval <= 0:
            raise ValueError("interval_seconds must be > 0")

        previous = self._timer
        if previous is not None:
            previous.cancel()
        self._timer = asyncio.create_task(self._tick_forever(interval), name="backup-timer")
        self._interval_s = interval

        if previous is not None:
            await asyncio.wait([previous])
            logger.info("Auto-backup rescheduled every %.1fs", interval)
        else:
            logger.info("Auto-backup enabled every %.1fs dir=%s", interval, self._backup_dir)

    async def disable(self) -> None:
        timer = self._timer
        self._timer = None
        self._interval_s = None
        if timer is None:
            return
        timer.cancel()
        await asyncio.wait([timer])
        logger.info("Auto-backup disabled.")

    async def shutdown(self) -> None:
        """Host deactivation: same as disable."""
        await self.disable()

    async def _tick_forever(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            self.run_once()

    # ---- one backup ----

    def run_once(self) -> Path | None:
        """
        Write one snapshot and enforce retention.

        Never raises: I/O failures are logged and the call returns None.
        """
        with self._write_lock:
            try:
                notes, tasks = self._store.snapshot()
                snap = Snapshot.capture(notes, tasks, version=self._version, when=self._clock())
                self._fs.mkdir(self._backup_dir)
                path = self._backup_dir / backup_filename(snap.timestamp)
                self._fs.write_bytes(path, snap.to_json(StampField.BACKED_UP).encode("utf-8"))
            except Exception:
                logger.exception("Backup write failed dir=%s", self._backup_dir)
                return None

            logger.debug("Backup written %s", path)
            self._prune()
            return path

    def list_backups(self) -> list[str]:
        """Backup file names, newest first. Missing directory -> []."""
        try:
            names = self._fs.list_names(self._backup_dir)
        except FileNotFoundError:
            return []
        return sorted((n for n in names if is_backup_filename(n)), reverse=True)

    def _prune(self) -> None:
        try:
            names = self.list_backups()
        except Exception:
            logger.exception("Backup listing failed dir=%s", self._backup_dir)
            return

        # Oldest first.
        for name in reversed(names[self._retention:]):
            try:
                self._fs.delete(self._backup_dir / name)
                logger.debug("Backup pruned %s", name)
            except Exception:
                logger.exception("Backup prune failed file=%s", name)
