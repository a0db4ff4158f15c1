"""Headless stand-in for the history window.

Presenting the history means printing the newest entries, one per line, the
way the list view orders them. It is what the wakeup signal triggers when no
rendering layer is attached.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

from config.constants import DEFAULT_TEXT_PREVIEW_LENGTH, PRESENT_ITEMS
from core.history import HistoryStore
from utils.text_helpers import format_bytes, single_line, truncate_text


class HeadlessPresenter:
    def __init__(
        self,
        store: HistoryStore,
        *,
        preview_length: int = DEFAULT_TEXT_PREVIEW_LENGTH,
        limit: int = PRESENT_ITEMS,
        stream: Optional[IO[str]] = None,
    ) -> None:
        self._store = store
        self._preview_length = preview_length
        self._limit = limit
        self._stream = stream

    def render(self) -> list[str]:
        """Return display lines for the newest entries, newest first."""

        entries = self._store.snapshot(newest_first=True)[: self._limit]
        lines = []
        for position, entry in enumerate(entries):
            if entry.is_image:
                label = f"[image {format_bytes(entry.image.size_bytes)}] {entry.content}"
            else:
                label = single_line(entry.content)
            lines.append(f"{position:>3}  {truncate_text(label, self._preview_length)}")
        return lines

    def present(self) -> None:
        lines = self.render()
        logging.info("Presenting %d clipboard history entries", len(lines))
        stream = self._stream or sys.stdout
        if not lines:
            print("(clipboard history is empty)", file=stream, flush=True)
            return
        print("\n".join(lines), file=stream, flush=True)
