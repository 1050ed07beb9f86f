# src/scratchpad/core/ports.py

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the host storage, file system, auth and network swappable and makes testing easier.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Protocol

JsonPayload = dict[str, Any]


class KeyValueStore(Protocol):
    """Host-provided persistence: JSON-compatible values under fixed keys."""

    def get(self, key: str, default: Any = None) -> Any: ...
    def set(self, key: str, value: Any) -> None: ...


class FileSystem(Protocol):
    """
    File capabilities used by the backup scheduler.

    mkdir must be an idempotent no-op when the directory already exists.
    """

    def mkdir(self, path: Path) -> None: ...
    def write_bytes(self, path: Path, data: bytes) -> None: ...
    def list_names(self, path: Path) -> list[str]: ...
    def delete(self, path: Path) -> None: ...


class AuthProvider(Protocol):
    """
    Token acquisition.

    interactive=False must never prompt; interactive=True may.
    Returns None when no token is available.
    """

    def get_token(self, interactive: bool) -> Awaitable[str | None]: ...


@dataclass(slots=True, frozen=True)
class HttpResponse:
    status: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class JsonTransport(Protocol):
    """HTTP-like request/response with a JSON body in and out."""

    def request(
            self,
            method: str,
            url: str,
            *,
            headers: dict[str, str] | None = None,
            json: JsonPayload | None = None,
    ) -> Awaitable[HttpResponse]: ...


@dataclass(slots=True, frozen=True)
class RemoteDocument:
    document_id: str
    url: str | None = None


class RemoteDocumentClient(Protocol):
    """Create-or-update access to a single remote document."""

    def create_document(self, token: str, payload: JsonPayload) -> Awaitable[RemoteDocument]: ...

    def update_document(
            self,
            token: str,
            document_id: str,
            payload: JsonPayload,
    ) -> Awaitable[RemoteDocument]: ...
