# src/scratchpad/sync/sync_engine.py

"""
Sync engine: push the local scratchpad to exactly one remote document.

First sync creates the document and remembers its id; every later sync updates
that id. The id is persisted before success is reported, so the only window for
a duplicate create is a crash between the create response and that write.

Overlapping sync() calls are not guarded here; the caller must not issue them.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from ..core.errors import AuthRequiredError, SyncError
from ..core.ports import AuthProvider, RemoteDocumentClient
from ..core.snapshot import Snapshot, StampField, utc_now
from ..core.state_store import ScratchpadStore
from .sync_state import NoRemote, RemoteId, RemoteTarget, SyncStateStore

logger = logging.getLogger(__name__)

# Asked when no token is available: "start interactive sign-in?" -> bool.
ConfirmAuth = Callable[[], bool | Awaitable[bool]]


class SyncAction(StrEnum):
    CREATED = "created"
    UPDATED = "updated"


@dataclass(slots=True, frozen=True)
class SyncOutcome:
    action: SyncAction
    document_id: str
    url: str | None = None


class SyncEngine:
    def __init__(
        self,
        store: ScratchpadStore,
        sync_state: SyncStateStore,
        auth: AuthProvider,
        client: RemoteDocumentClient,
        *,
        version: str = "1.0",
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._sync_state = sync_state
        self._auth = auth
        self._client = client
        self._version = version
        self._clock = clock

    def status(self) -> RemoteTarget:
        return self._sync_state.get()

    def disconnect(self) -> None:
        """Forget the remote id. The remote document and the token are left alone."""
        self._sync_state.clear()

    async def _ask(self, confirm: ConfirmAuth) -> bool:
        if inspect.iscoroutinefunction(confirm):
            return bool(await confirm())
        answer = await asyncio.to_thread(confirm)
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)

    async def _acquire_token(self, confirm: ConfirmAuth | None) -> str:
        token = await self._auth.get_token(interactive=False)
        if token:
            return token

        if confirm is None:
            raise AuthRequiredError()
        if not await self._ask(confirm):
            logger.info("Sync aborted: interactive sign-in declined.")
            raise AuthRequiredError("Sync cancelled: not signed in.")

        token = await self._auth.get_token(interactive=True)
        if not token:
            raise AuthRequiredError("Sign-in did not provide a token.")
        return token

    async def sync(self, *, confirm_interactive: ConfirmAuth | None = None) -> SyncOutcome:
        token = await self._acquire_token(confirm_interactive)

        notes, tasks = self._store.snapshot()
        payload = Snapshot.capture(notes, tasks, version=self._version, when=self._clock()).to_payload(
            StampField.SYNCED
        )

        target = self._sync_state.get()
        try:
            if isinstance(target, NoRemote):
                doc = await self._client.create_document(token, payload)
                action = SyncAction.CREATED
            elif isinstance(target, RemoteId):
                doc = await self._client.update_document(token, target.document_id, payload)
                action = SyncAction.UPDATED
            else:
                raise TypeError(f"unexpected remote target: {target!r}")
        except SyncError:
            raise
        except Exception as e:
            logger.exception("Remote call crashed")
            raise SyncError("Sync failed.") from e

        if action == SyncAction.CREATED:
            self._sync_state.set_remote(doc.document_id)

        logger.info("Sync %s id=%s tasks=%d", action.value, doc.document_id, len(payload["tasks"]))
        return SyncOutcome(action=action, document_id=doc.document_id, url=doc.url)
