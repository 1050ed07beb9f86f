# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from scratchpad.backup.scheduler import BackupScheduler
from scratchpad.core.errors import SyncError
from scratchpad.core.ports import JsonPayload, RemoteDocument
from scratchpad.core.state import AppState
from scratchpad.core.state_store import ScratchpadStore
from scratchpad.storage.filesystem import LocalFileSystem
from scratchpad.storage.kv_store import MemoryKeyValueStore
from scratchpad.sync.sync_engine import SyncEngine
from scratchpad.sync.sync_state import SyncStateStore


class FakeAuth:
    """
    Deterministic AuthProvider.

    - `token` is returned for non-interactive calls
    - `interactive_token` is what an interactive sign-in "produces"
    """

    def __init__(self, token: str | None = None, interactive_token: str | None = None) -> None:
        self.token = token
        self.interactive_token = interactive_token
        self.calls: list[bool] = []

    async def get_token(self, interactive: bool) -> str | None:
        self.calls.append(interactive)
        if self.token:
            return self.token
        if interactive and self.interactive_token:
            self.token = self.interactive_token
        return self.token


class FakeRemoteClient:
    """
    In-memory RemoteDocumentClient.

    Captures calls for assertions; `fail_with` makes the next calls raise.
    """

    def __init__(self) -> None:
        self.documents: dict[str, JsonPayload] = {}
        self.creates: list[JsonPayload] = []
        self.updates: list[tuple[str, JsonPayload]] = []
        self.tokens: list[str] = []
        self.fail_with: Exception | None = None
        self._next = 0

    async def create_document(self, token: str, payload: JsonPayload) -> RemoteDocument:
        self.tokens.append(token)
        if self.fail_with is not None:
            raise self.fail_with
        self._next += 1
        doc_id = f"doc-{self._next}"
        self.creates.append(payload)
        self.documents[doc_id] = payload
        return RemoteDocument(document_id=doc_id, url=f"https://gist.example/{doc_id}")

    async def update_document(self, token: str, document_id: str, payload: JsonPayload) -> RemoteDocument:
        self.tokens.append(token)
        if self.fail_with is not None:
            raise self.fail_with
        if document_id not in self.documents:
            raise SyncError("Not Found", status=404)
        self.updates.append((document_id, payload))
        self.documents[document_id] = payload
        return RemoteDocument(document_id=document_id, url=f"https://gist.example/{document_id}")


class FailingFileSystem(LocalFileSystem):
    """LocalFileSystem whose writes (and optionally deletes) fail on demand."""

    def __init__(self) -> None:
        self.fail_writes = False
        self.fail_deletes = False

    def write_bytes(self, path: Path, data: bytes) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        super().write_bytes(path, data)

    def delete(self, path: Path) -> None:
        if self.fail_deletes:
            raise PermissionError("locked")
        super().delete(path)


def stepping_clock(start: datetime | None = None, step: timedelta = timedelta(seconds=1)) -> Callable[[], datetime]:
    """Clock that moves forward by `step` on every call."""
    current = [start or datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)]

    def now() -> datetime:
        value = current[0]
        current[0] = value + step
        return value

    return now


@pytest.fixture()
def clock() -> Callable[[], datetime]:
    return stepping_clock()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the command layer.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="scratchpad-test",
        data_dir=tmp_path,
        backup_dir=tmp_path / "backups",
        backup_interval_minutes=30,
        backup_retention=10,
        snapshot_version="1.0",
    )


@pytest.fixture()
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture()
def store(kv: MemoryKeyValueStore) -> ScratchpadStore:
    return ScratchpadStore(kv)


@pytest.fixture()
def auth() -> FakeAuth:
    return FakeAuth(token="tok")


@pytest.fixture()
def failing_fs() -> FailingFileSystem:
    return FailingFileSystem()


@pytest.fixture()
def remote() -> FakeRemoteClient:
    return FakeRemoteClient()


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    kv: MemoryKeyValueStore,
    store: ScratchpadStore,
    auth: FakeAuth,
    remote: FakeRemoteClient,
    clock: Callable[[], datetime],
) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: backups use the real local filesystem (under tmp_path) because the
    written files are part of what we want to test.
    """
    backups = BackupScheduler(
        store,
        LocalFileSystem(),
        backup_dir=settings.backup_dir,
        retention=settings.backup_retention,
        clock=clock,
    )
    sync = SyncEngine(store, SyncStateStore(kv), auth, remote, clock=clock)
    return AppState(settings=settings, kv=kv, store=store, backups=backups, sync=sync)

