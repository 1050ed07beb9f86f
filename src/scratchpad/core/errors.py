# src/scratchpad/core/errors.py

from __future__ import annotations


class ScratchpadError(Exception):
    """Base class for errors surfaced to the caller of a core operation."""


class SyncError(ScratchpadError):
    """Remote sync failed (non-success response or transport failure)."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class AuthRequiredError(SyncError):
    """
    No auth token is available.

    Recoverable: the caller may start an interactive auth flow and retry.
    """

    def __init__(self, message: str = "Authentication required to sync.") -> None:
        super().__init__(message)


class ImportFormatError(ScratchpadError):
    """Import payload failed validation; nothing was applied."""
