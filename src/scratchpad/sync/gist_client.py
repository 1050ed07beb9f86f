# src/scratchpad/sync/gist_client.py

"""
Remote document client: one GitHub Gist holding one JSON file.

Create = POST /gists (returns the id we remember); update = PATCH /gists/{id}.
PATCH with unchanged content is accepted by the API, so repeating an update is safe.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ..core.errors import SyncError
from ..core.ports import HttpResponse, JsonPayload, JsonTransport, RemoteDocument

logger = logging.getLogger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class HttpxJsonTransport:
    """
    JsonTransport over httpx.

    The timeout bounds every remote call; a hung server surfaces as SyncError
    instead of a sync that never resolves.
    """

    def __init__(self, *, timeout_seconds: float = 30.0, client: httpx.AsyncClient | None = None) -> None:
        self._timeout = httpx.Timeout(timeout_seconds, connect=min(10.0, timeout_seconds))
        self._client = client

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        json: JsonPayload | None = None,
    ) -> HttpResponse:
        try:
            if self._client is not None:
                resp = await self._client.request(method, url, headers=headers, json=json)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.request(method, url, headers=headers, json=json)
        except httpx.TimeoutException as e:
            raise SyncError("Remote request timed out.") from e
        except httpx.HTTPError as e:
            raise SyncError(f"Network error: {e}") from e

        body: Any
        try:
            body = resp.json()
        except ValueError:
            body = resp.text
        return HttpResponse(status=resp.status_code, body=body)


def remote_error_message(resp: HttpResponse) -> str:
    """The remote's own message when it sent one, else a generic one."""
    if isinstance(resp.body, dict):
        msg = resp.body.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return f"Remote sync failed (HTTP {resp.status})."


class GistDocumentClient:
    def __init__(
        self,
        transport: JsonTransport,
        *,
        api_url: str = "https://api.github.com",
        filename: str = "scratchpad-sync.json",
        description: str = "Scratchpad notes and tasks",
        public: bool = False,
    ) -> None:
        self._transport = transport
        self._api_url = api_url.rstrip("/")
        self._filename = filename
        self._description = description
        self._public = public

    @staticmethod
    def _headers(token: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }

    def _files(self, payload: JsonPayload) -> dict[str, Any]:
        content = json.dumps(payload, ensure_ascii=False, indent=2)
        return {self._filename: {"content": content}}

    async def create_document(self, token: str, payload: JsonPayload) -> RemoteDocument:
        resp = await self._transport.request(
            "POST",
            f"{self._api_url}/gists",
            headers=self._headers(token),
            json={
                "description": self._description,
                "public": self._public,
                "files": self._files(payload),
            },
        )
        if not resp.ok:
            logger.warning("Gist create failed status=%s", resp.status)
            raise SyncError(remote_error_message(resp), status=resp.status)
        return self._document_from(resp)

    async def update_document(self, token: str, document_id: str, payload: JsonPayload) -> RemoteDocument:
        resp = await self._transport.request(
            "PATCH",
            f"{self._api_url}/gists/{document_id}",
            headers=self._headers(token),
            json={
                "description": self._description,
                "files": self._files(payload),
            },
        )
        if not resp.ok:
            logger.warning("Gist update failed status=%s id=%s", resp.status, document_id)
            raise SyncError(remote_error_message(resp), status=resp.status)
        return self._document_from(resp, fallback_id=document_id)

    @staticmethod
    def _document_from(resp: HttpResponse, fallback_id: str | None = None) -> RemoteDocument:
        body = resp.body if isinstance(resp.body, dict) else {}
        doc_id = body.get("id") or fallback_id
        if not isinstance(doc_id, str) or not doc_id.strip():
            raise SyncError("Remote response did not include a document id.", status=resp.status)
        url = body.get("html_url")
        return RemoteDocument(document_id=doc_id, url=url if isinstance(url, str) else None)
