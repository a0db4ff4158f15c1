"""Thread-safe, bounded and deduplicated clipboard history with persistence.

The history is kept oldest first; the tail is the most recently seen value.
Every mutation that changes membership or order rewrites the JSON history file
before it returns. A failed write is logged and the in-memory state stays
authoritative.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import List, Optional, Tuple

from config.constants import DEFAULT_MAX_ENTRIES
from core.errors import (
    ClipboardToolError,
    HistoryNotFoundError,
    HistoryPersistenceError,
)
from core.image_resolver import file_uri_to_path
from core.models import (
    GENERIC_IMAGE_MIME,
    HistoryEntry,
    ImageEntry,
    ImageMeta,
    ImageSource,
    TextEntry,
)
from utils.clipboard_tools import ClipboardTools
from utils.rwlock import ReadWriteLock


def entry_from_content(content: str) -> HistoryEntry:
    """Rebuild a history entry from its persisted content string.

    ``file://`` URIs pointing at an existing file become image entries with
    freshly collected metadata; everything else is text.
    """

    path = file_uri_to_path(content)
    if path:
        try:
            stat = os.stat(path)
        except OSError:
            stat = None
        if stat is not None:
            meta = ImageMeta(
                source=ImageSource.FILE_SYSTEM,
                mime_type=GENERIC_IMAGE_MIME,
                local_path=path,
                size_bytes=stat.st_size,
            )
            return ImageEntry(content, meta)
    return TextEntry(content)


class HistoryStore:
    """Authoritative ordered collection of clipboard history entries."""

    def __init__(
        self,
        path: os.PathLike,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        *,
        clipboard: Optional[ClipboardTools] = None,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.path = Path(path)
        self.max_entries = max_entries
        self._clipboard = clipboard
        self._entries: List[HistoryEntry] = []
        self._lock = ReadWriteLock()
        self._file_lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._entries)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def ensure_storage(self) -> None:
        """Create the history file and its directory if they are missing."""

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch(exist_ok=True)
        except OSError as exc:
            raise HistoryPersistenceError(
                f"History file {self.path} is not writable: {exc}"
            ) from exc

    def read(self) -> List[HistoryEntry]:
        """Parse the history file without touching the in-memory state."""

        try:
            with open(self.path, "r", encoding="utf-8") as handle:
                text = handle.read()
        except FileNotFoundError:
            logging.debug("History file %s does not exist yet", self.path)
            return []
        except OSError as exc:
            logging.error("Failed to read history file %s: %s", self.path, exc)
            return []

        if not text.strip():
            return []

        try:
            stored = json.loads(text)
        except ValueError as exc:
            logging.error("History file %s is malformed: %s", self.path, exc)
            return []

        if not isinstance(stored, list):
            logging.error("History file %s does not contain a JSON array", self.path)
            return []

        entries: List[HistoryEntry] = []
        for item in stored:
            if not isinstance(item, str):
                logging.debug("Skipping non-string history item %r", item)
                continue
            entries.append(entry_from_content(item))
        return _deduplicate(entries)

    def load(self) -> List[HistoryEntry]:
        """Replace the in-memory history with the persisted one."""

        entries = self.read()
        with self._lock.write_locked():
            self._entries = list(entries)
        logging.info("Loaded %d clipboard history entries from %s", len(entries), self.path)
        return list(entries)

    def save(self) -> None:
        with self._lock.read_locked():
            self._write_file(self._entries)

    def _write_file(self, entries: List[HistoryEntry]) -> None:
        contents = [entry.content for entry in entries if entry.content]
        try:
            with self._file_lock:
                with open(self.path, "w", encoding="utf-8") as handle:
                    json.dump(contents, handle, ensure_ascii=False)
                    handle.write("\n")
        except OSError as exc:
            logging.error("Could not save clipboard history to %s: %s", self.path, exc)
            raise HistoryPersistenceError(str(exc)) from exc

    def _persist_quietly(self) -> bool:
        try:
            self._write_file(self._entries)
        except HistoryPersistenceError:
            return False
        return True

    def clear(self) -> None:
        """Truncate the history file; the in-memory entries are left alone."""

        try:
            with self._file_lock:
                with open(self.path, "w", encoding="utf-8"):
                    pass
        except OSError as exc:
            logging.error("Failed to clear clipboard history %s: %s", self.path, exc)
            raise HistoryPersistenceError(str(exc)) from exc
        logging.info("Clipboard history file %s cleared", self.path)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def contains(self, content: str) -> Tuple[bool, int]:
        with self._lock.read_locked():
            index = self._index_of(content)
        return index >= 0, index

    def tail_content(self) -> Optional[str]:
        with self._lock.read_locked():
            if not self._entries:
                return None
            return self._entries[-1].content

    def snapshot(self, *, newest_first: bool = False) -> List[HistoryEntry]:
        with self._lock.read_locked():
            entries = list(self._entries)
        if newest_first:
            entries.reverse()
        return entries

    def _index_of(self, content: str) -> int:
        for index, entry in enumerate(self._entries):
            if entry.content == content:
                return index
        return -1

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def upsert(self, entry: HistoryEntry) -> None:
        """Insert *entry* at the tail, moving an equal entry instead of duplicating."""

        with self._lock.write_locked():
            index = self._index_of(entry.content)
            if index >= 0:
                del self._entries[index]
            self._entries.append(entry)
            evicted = self._evict_overflow()
            self._persist_quietly()
        if evicted:
            logging.debug("Evicted %d oldest clipboard entries", evicted)

    def remove_at(self, index: int) -> int:
        """Delete the entry at *index* and return that index.

        When the tail is deleted the new tail is written back to the system
        clipboard first, otherwise the poller would see the old clipboard
        value as new content and insert it again. Deleting the last remaining
        entry clears the clipboard for the same reason.
        """

        with self._lock.write_locked():
            if index < 0 or index >= len(self._entries):
                raise HistoryNotFoundError(f"No history entry at index {index}")

            was_tail = index == len(self._entries) - 1
            del self._entries[index]

            if was_tail and self._entries:
                self._write_clipboard(self._entries[-1])
            elif was_tail:
                self._clear_clipboard()

            try:
                self._write_file(self._entries)
            except HistoryPersistenceError:
                logging.warning("History entry %d removed in memory only", index)
                raise
        return index

    def select(self, index: int) -> HistoryEntry:
        """Move the entry at *index* to the tail and put it on the clipboard."""

        with self._lock.write_locked():
            if index < 0 or index >= len(self._entries):
                raise HistoryNotFoundError(f"No history entry at index {index}")
            entry = self._entries.pop(index)
            self._entries.append(entry)
            self._write_clipboard(entry)
            self._persist_quietly()
        return entry

    def trim_to_capacity(self) -> int:
        """Drop the oldest entries beyond ``max_entries``; returns how many."""

        with self._lock.write_locked():
            removed = self._evict_overflow()
            if removed:
                self._persist_quietly()
        if removed:
            logging.info("Trimmed %d clipboard entries to respect the limit of %d", removed, self.max_entries)
        return removed

    def _evict_overflow(self) -> int:
        overflow = len(self._entries) - self.max_entries
        if overflow <= 0:
            return 0
        del self._entries[:overflow]
        return overflow

    def _write_clipboard(self, entry: HistoryEntry) -> None:
        if self._clipboard is None:
            return
        try:
            self._clipboard.write(entry.content, entry.clipboard_mime_type)
        except ClipboardToolError as exc:
            logging.warning("Could not write history entry to the clipboard: %s", exc)

    def _clear_clipboard(self) -> None:
        if self._clipboard is None:
            return
        try:
            self._clipboard.clear()
        except ClipboardToolError as exc:
            logging.warning("Could not clear the clipboard: %s", exc)


def _deduplicate(entries: List[HistoryEntry]) -> List[HistoryEntry]:
    """Keep only the newest occurrence of every content value."""

    seen = set()
    unique: List[HistoryEntry] = []
    for entry in reversed(entries):
        if entry.content in seen:
            continue
        seen.add(entry.content)
        unique.append(entry)
    unique.reverse()
    if len(unique) != len(entries):
        logging.warning("Dropped %d duplicate clipboard history entries", len(entries) - len(unique))
    return unique
