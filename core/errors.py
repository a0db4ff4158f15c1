"""Exception hierarchy used across the clipboard history core."""

from __future__ import annotations

from typing import Optional


class BBClipError(Exception):
    """Base class for every error raised by bbclip."""


class ClipboardToolError(BBClipError):
    """An external clipboard utility is missing, failed or timed out."""


class ImageFetchError(BBClipError):
    """A browser sourced image could not be downloaded into the cache."""

    def __init__(self, message: str, *, origin: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.origin = origin
        self.cause = cause


class HistoryPersistenceError(BBClipError):
    """Writing the history file failed; the in-memory state is still valid."""


class HistoryNotFoundError(BBClipError, IndexError):
    """The requested history index does not exist."""
