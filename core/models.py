"""Value types describing clipboard history entries.

An entry is either plain text or an image reference. Image entries keep the
``file://`` URI of the local image as their content, so two entries are the
same history item exactly when their ``content`` strings are equal; the image
metadata never takes part in that comparison.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional

FILE_SCHEME = "file://"
GENERIC_IMAGE_MIME = "image/*"


class ImageSource(enum.Enum):
    """Where an image on the clipboard came from."""

    BROWSER = "browser"
    FILE_SYSTEM = "file_system"


@dataclass(frozen=True)
class ImageMeta:
    source: Optional[ImageSource] = None
    mime_type: str = GENERIC_IMAGE_MIME
    local_path: str = ""
    size_bytes: int = 0
    # Remote URL for browser images, empty for local files.
    origin: str = ""


@dataclass(frozen=True)
class HistoryEntry:
    content: str

    @property
    def is_image(self) -> bool:
        return False

    @property
    def clipboard_mime_type(self) -> str:
        return "text/plain"


@dataclass(frozen=True)
class TextEntry(HistoryEntry):
    pass


@dataclass(frozen=True)
class ImageEntry(HistoryEntry):
    image: ImageMeta = field(default_factory=ImageMeta)

    @property
    def is_image(self) -> bool:
        return True

    @property
    def clipboard_mime_type(self) -> str:
        # File managers and browsers accept a uri-list for image pastes.
        return "text/uri-list"


__all__ = [
    "FILE_SCHEME",
    "GENERIC_IMAGE_MIME",
    "HistoryEntry",
    "ImageEntry",
    "ImageMeta",
    "ImageSource",
    "TextEntry",
]
