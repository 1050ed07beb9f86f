# src/scratchpad/sync/sync_state.py

"""
Remote document identity.

The stored id is the only thing that decides "create" vs "update", so it is
modelled as an explicit two-state tag instead of an optional string: an empty
string can never be mistaken for a real remote.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.ports import KeyValueStore

logger = logging.getLogger(__name__)

REMOTE_ID_KEY = "gistId"


@dataclass(slots=True, frozen=True)
class NoRemote:
    pass


@dataclass(slots=True, frozen=True)
class RemoteId:
    document_id: str

    def __post_init__(self) -> None:
        if not isinstance(self.document_id, str) or not self.document_id.strip():
            raise ValueError("document_id must be a non-empty string")


RemoteTarget = NoRemote | RemoteId


class SyncStateStore:
    """Persists the remote document id in the host key/value store. Tokens never land here."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    def get(self) -> RemoteTarget:
        raw = self._kv.get(REMOTE_ID_KEY, None)
        if isinstance(raw, str) and raw.strip():
            return RemoteId(raw.strip())
        return NoRemote()

    def set_remote(self, document_id: str) -> RemoteId:
        target = RemoteId(document_id)
        self._kv.set(REMOTE_ID_KEY, target.document_id)
        logger.info("Remote document linked id=%s", target.document_id)
        return target

    def clear(self) -> None:
        self._kv.set(REMOTE_ID_KEY, None)
        logger.info("Remote document unlinked.")
