# src/scratchpad/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..backup.scheduler import BackupScheduler
from ..sync.sync_engine import SyncEngine
from .ports import KeyValueStore
from .state_store import ScratchpadStore

if TYPE_CHECKING:
    from ..connectors.background import BackgroundLoop


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    kv: KeyValueStore
    store: ScratchpadStore
    backups: BackupScheduler
    sync: SyncEngine

    # Event loop hosting the backup timer (set by cli.main; None in plain unit tests).
    loop: BackgroundLoop | None = None

    # Yes/no prompt provided by the active connector (used to offer interactive sign-in).
    confirm: Callable[[str], bool] | None = None
