"""Background clipboard sampling that feeds the history store."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from config.constants import DEFAULT_POLL_INTERVAL
from core.errors import ClipboardToolError, ImageFetchError
from core.history import HistoryStore
from core.image_resolver import ImageResolver
from core.models import HistoryEntry, TextEntry
from utils.clipboard_tools import ClipboardTools


class ClipboardPoller:
    """Poll the system clipboard and upsert novel content into the store.

    External tools are only ever called with no history lock held; the store
    takes its write lock inside :meth:`HistoryStore.upsert`.
    """

    def __init__(
        self,
        store: HistoryStore,
        tools: ClipboardTools,
        resolver: Optional[ImageResolver] = None,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._store = store
        self._tools = tools
        # Image support is disabled when no resolver is supplied.
        self._resolver = resolver
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            logging.debug("ClipboardPoller.start called while active")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="ClipboardPoller",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: float = 1.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread and thread.is_alive() and threading.current_thread() is not thread:
            thread.join(timeout=timeout)
        self._thread = None

    @property
    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def poll_once(self) -> Optional[HistoryEntry]:
        """Run a single sampling tick; returns the stored entry, if any."""

        try:
            raw = self._tools.read_text()
        except ClipboardToolError as exc:
            logging.debug("Clipboard read skipped: %s", exc)
            return None

        content = raw.strip()
        if not content:
            return None

        last = self._store.tail_content()
        meta = self._resolver.probe() if self._resolver else None

        if meta is None:
            if content == last:
                return None
            entry: HistoryEntry = TextEntry(content)
        else:
            fallback = self._resolver.fallback_text(content, meta)
            # A failed download leaves the fallback text at the tail.
            if last is not None and last in (self._resolver.file_uri(content, meta), fallback):
                return None
            try:
                entry = self._resolver.resolve(content, meta)
            except ImageFetchError as exc:
                # Keep a text entry for the remote image rather than losing it.
                fallback = fallback or exc.origin or content
                logging.warning("Storing %s as text after failed image download", fallback)
                entry = TextEntry(fallback)

        self._store.upsert(entry)
        logging.debug(
            "Captured clipboard %s entry (%d chars)",
            "image" if entry.is_image else "text",
            len(entry.content),
        )
        return entry

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------
    def _run(self) -> None:
        logging.info("ClipboardPoller loop started (interval %.2fs)", self._interval)
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except Exception as exc:
                logging.error("ClipboardPoller iteration failed: %s", exc, exc_info=True)
            self._stop_event.wait(self._interval)
        logging.info("ClipboardPoller loop stopped")
