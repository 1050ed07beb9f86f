# src/scratchpad/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations of every port into AppState.
"""

from __future__ import annotations

import logging

from ..backup.scheduler import BackupScheduler
from ..config import get_settings
from ..core.state import AppState
from ..core.state_store import ScratchpadStore
from ..storage.filesystem import LocalFileSystem
from ..storage.kv_store import SqliteKeyValueStore
from ..sync.auth import SettingsTokenProvider, console_token_prompt
from ..sync.gist_client import GistDocumentClient, HttpxJsonTransport
from ..sync.sync_engine import SyncEngine
from ..sync.sync_state import SyncStateStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.kv_db_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None, kv=None, token_prompt=console_token_prompt) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the key/value store) injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    if kv is None:
        kv = SqliteKeyValueStore(settings.kv_db_path)
    store = ScratchpadStore(kv)

    backups = BackupScheduler(
        store,
        LocalFileSystem(),
        backup_dir=settings.backup_dir,
        retention=settings.backup_retention,
        version=settings.snapshot_version,
    )

    client = GistDocumentClient(
        HttpxJsonTransport(timeout_seconds=settings.sync_timeout_seconds),
        api_url=settings.github_api_url,
        filename=settings.gist_filename,
        description=settings.gist_description,
        public=settings.gist_public,
    )
    sync = SyncEngine(
        store,
        SyncStateStore(kv),
        SettingsTokenProvider(settings.github_token, prompt=token_prompt),
        client,
        version=settings.snapshot_version,
    )

    logger.debug("State wired kv=%s backups=%s", type(kv).__name__, settings.backup_dir)
    return AppState(settings=settings, kv=kv, store=store, backups=backups, sync=sync)
