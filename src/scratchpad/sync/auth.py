# src/scratchpad/sync/auth.py

from __future__ import annotations

import asyncio
import getpass
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

TokenPrompt = Callable[[], str | None]


def console_token_prompt() -> str | None:
    try:
        token = getpass.getpass("GitHub token (gist scope): ").strip()
    except (EOFError, KeyboardInterrupt):
        return None
    return token or None


class SettingsTokenProvider:
    """
    AuthProvider backed by a configured token.

    interactive=True may ask via `prompt` (runs in a worker thread); the answer is
    kept in memory for this process only and is never written to disk.
    """

    def __init__(self, token: str | None = None, *, prompt: TokenPrompt | None = None) -> None:
        self._token = (token or "").strip() or None
        self._prompt = prompt

    async def get_token(self, interactive: bool) -> str | None:
        if self._token:
            return self._token
        if not interactive or self._prompt is None:
            return None

        token = await asyncio.to_thread(self._prompt)
        token = (token or "").strip() or None
        if token:
            logger.info("Auth token acquired interactively.")
            self._token = token
        return token

    def forget(self) -> None:
        self._token = None
