# tests/test_sync_engine.py

from __future__ import annotations

import pytest

from scratchpad.core.errors import AuthRequiredError, SyncError
from scratchpad.core.state_store import ScratchpadStore
from scratchpad.storage.kv_store import MemoryKeyValueStore
from scratchpad.sync.sync_engine import SyncAction, SyncEngine
from scratchpad.sync.sync_state import REMOTE_ID_KEY, NoRemote, RemoteId, SyncStateStore
from scratchpad.tasks.task_models import Task


@pytest.fixture()
def engine(store, kv, auth, remote, clock) -> SyncEngine:
    return SyncEngine(store, SyncStateStore(kv), auth, remote, clock=clock)


@pytest.mark.asyncio
async def test_first_sync_creates_then_updates(engine: SyncEngine, store: ScratchpadStore, kv, remote) -> None:
    store.set_notes("n1")
    store.set_tasks([Task("a")])

    first = await engine.sync()
    assert first.action == SyncAction.CREATED
    assert first.document_id == "doc-1"
    assert kv.get(REMOTE_ID_KEY) == "doc-1"
    assert engine.status() == RemoteId("doc-1")

    store.set_notes("n2")
    second = await engine.sync()
    assert second.action == SyncAction.UPDATED
    assert second.document_id == "doc-1"

    assert len(remote.creates) == 1
    assert len(remote.updates) == 1
    assert remote.documents["doc-1"]["notes"] == "n2"


@pytest.mark.asyncio
async def test_payload_shape(engine: SyncEngine, store: ScratchpadStore, remote) -> None:
    store.set_notes("hello")
    store.set_tasks([Task("a", done=True)])

    await engine.sync()

    assert remote.creates[0] == {
        "version": "1.0",
        "syncedAt": "2024-01-02T03:04:05.000000Z",
        "notes": "hello",
        "tasks": [{"text": "a", "done": True}],
    }
    assert remote.tokens == ["tok"]


@pytest.mark.asyncio
async def test_failed_create_leaves_no_remote_id(engine: SyncEngine, kv, remote) -> None:
    remote.fail_with = SyncError("Bad credentials", status=401)

    with pytest.raises(SyncError) as exc:
        await engine.sync()

    assert exc.value.message == "Bad credentials"
    assert exc.value.status == 401
    assert kv.get(REMOTE_ID_KEY) is None
    assert engine.status() == NoRemote()

    # Next attempt after recovery creates exactly one document.
    remote.fail_with = None
    outcome = await engine.sync()
    assert outcome.action == SyncAction.CREATED
    assert len(remote.creates) == 1


@pytest.mark.asyncio
async def test_failed_update_keeps_remote_id(engine: SyncEngine, kv, remote) -> None:
    await engine.sync()
    remote.fail_with = SyncError("Server Error", status=500)

    with pytest.raises(SyncError):
        await engine.sync()

    assert kv.get(REMOTE_ID_KEY) == "doc-1"


@pytest.mark.asyncio
async def test_unexpected_client_error_is_wrapped(engine: SyncEngine, kv, remote) -> None:
    remote.fail_with = RuntimeError("boom")

    with pytest.raises(SyncError) as exc:
        await engine.sync()

    assert not isinstance(exc.value, AuthRequiredError)
    assert kv.get(REMOTE_ID_KEY) is None


@pytest.mark.asyncio
async def test_deleted_remote_surfaces_error(store, kv, auth, remote, clock) -> None:
    kv.set(REMOTE_ID_KEY, "gone")
    engine = SyncEngine(store, SyncStateStore(kv), auth, remote, clock=clock)

    with pytest.raises(SyncError) as exc:
        await engine.sync()

    assert exc.value.status == 404
    assert remote.creates == []


@pytest.mark.asyncio
async def test_no_token_without_confirm_raises_auth_required(engine: SyncEngine, auth, remote) -> None:
    auth.token = None

    with pytest.raises(AuthRequiredError):
        await engine.sync()

    assert auth.calls == [False]
    assert remote.tokens == []


@pytest.mark.asyncio
async def test_declined_sign_in_aborts(engine: SyncEngine, auth, remote) -> None:
    auth.token = None
    auth.interactive_token = "fresh"

    with pytest.raises(AuthRequiredError):
        await engine.sync(confirm_interactive=lambda: False)

    assert auth.calls == [False]
    assert remote.tokens == []


@pytest.mark.asyncio
async def test_accepted_sign_in_syncs(engine: SyncEngine, auth, remote) -> None:
    auth.token = None
    auth.interactive_token = "fresh"

    async def confirm() -> bool:
        return True

    outcome = await engine.sync(confirm_interactive=confirm)

    assert outcome.action == SyncAction.CREATED
    assert auth.calls == [False, True]
    assert remote.tokens == ["fresh"]


@pytest.mark.asyncio
async def test_sign_in_without_token_raises(engine: SyncEngine, auth) -> None:
    auth.token = None

    with pytest.raises(AuthRequiredError):
        await engine.sync(confirm_interactive=lambda: True)


@pytest.mark.asyncio
async def test_disconnect_forgets_remote(engine: SyncEngine, kv, remote) -> None:
    await engine.sync()
    engine.disconnect()

    assert engine.status() == NoRemote()
    outcome = await engine.sync()
    assert outcome.action == SyncAction.CREATED
    assert outcome.document_id == "doc-2"


def test_blank_stored_id_reads_as_no_remote() -> None:
    kv = MemoryKeyValueStore({REMOTE_ID_KEY: "   "})
    assert SyncStateStore(kv).get() == NoRemote()

    with pytest.raises(ValueError):
        RemoteId("")
