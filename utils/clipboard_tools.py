# clipboard_tools.py
#
# Thin wrappers around the external clipboard utilities. On Wayland sessions
# the wl-clipboard tools (wl-paste / wl-copy) are used because they expose the
# offered MIME types; everywhere else pyperclip serves as the text-only
# fallback.

from __future__ import annotations

import logging
import shutil
import subprocess
import threading
from typing import List, Optional, Sequence

import pyperclip

from config.constants import CLIPBOARD_READ_TIMEOUT, WL_COPY, WL_PASTE
from core.errors import ClipboardToolError

PyperclipException = getattr(pyperclip, "PyperclipException", Exception)


def _describe_text(text: str) -> str:
    """Build a short human readable preview for logging purposes."""

    preview = text.replace("\n", "\\n")
    if len(preview) > 40:
        preview = f"{preview[:37]}..."
    return f"text(len={len(text)} preview='{preview}')"


class ClipboardTools:
    """Interface of the clipboard operations the history core consumes."""

    name = "abstract"

    def read_text(self) -> str:
        raise NotImplementedError

    def list_types(self) -> List[str]:
        raise NotImplementedError

    def write(self, content: str, mime_type: str = "text/plain") -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError


class WaylandClipboardTools(ClipboardTools):
    """Clipboard access through the wl-clipboard command line tools."""

    name = "wl-clipboard"

    def __init__(
        self,
        *,
        paste_command: str = WL_PASTE,
        copy_command: str = WL_COPY,
        timeout: float = CLIPBOARD_READ_TIMEOUT,
    ) -> None:
        self._paste = paste_command
        self._copy = copy_command
        self._timeout = timeout

    def _run_paste(self, args: Sequence[str]) -> bytes:
        command = [self._paste, *args]
        try:
            result = subprocess.run(
                command,
                check=True,
                capture_output=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as exc:
            raise ClipboardToolError(f"{self._paste} is not installed") from exc
        except subprocess.TimeoutExpired as exc:
            raise ClipboardToolError(f"{' '.join(command)} timed out after {self._timeout}s") from exc
        except subprocess.CalledProcessError as exc:
            # wl-paste exits non-zero while the clipboard is empty.
            raise ClipboardToolError(
                f"{' '.join(command)} exited with status {exc.returncode}"
            ) from exc
        except OSError as exc:
            raise ClipboardToolError(f"Failed to run {self._paste}: {exc}") from exc
        return result.stdout

    def read_text(self) -> str:
        raw = self._run_paste(["--no-newline"])
        return raw.decode("utf-8", errors="replace")

    def list_types(self) -> List[str]:
        raw = self._run_paste(["--list-types"])
        text = raw.decode("utf-8", errors="replace")
        return [line.strip() for line in text.splitlines() if line.strip()]

    def write(self, content: str, mime_type: str = "text/plain") -> None:
        """Hand *content* to ``wl-copy``.

        ``wl-copy --foreground`` keeps serving the selection until another
        client takes ownership, so the process is left running and reaped by
        a daemon thread instead of being waited for here.
        """

        command = [self._copy, "--type", mime_type, "--foreground"]
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise ClipboardToolError(f"Failed to run {self._copy}: {exc}") from exc

        try:
            assert process.stdin is not None
            process.stdin.write(content.encode("utf-8"))
            process.stdin.close()
        except OSError as exc:
            process.kill()
            raise ClipboardToolError(f"Failed to stream clipboard content to {self._copy}: {exc}") from exc

        threading.Thread(target=process.wait, name="WlCopyReaper", daemon=True).start()
        logging.debug("Set clipboard via %s (%s): %s", self._copy, mime_type, _describe_text(content))

    def clear(self) -> None:
        command = [self._copy, "--clear"]
        try:
            process = subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
        except OSError as exc:
            raise ClipboardToolError(f"Failed to run {self._copy}: {exc}") from exc
        threading.Thread(target=process.wait, name="WlCopyReaper", daemon=True).start()
        logging.debug("Cleared clipboard via %s", self._copy)


class PyperclipTools(ClipboardTools):
    """Text-only fallback backed by pyperclip; no MIME type listing."""

    name = "pyperclip"

    def read_text(self) -> str:
        try:
            content = pyperclip.paste()
        except PyperclipException as exc:
            raise ClipboardToolError(f"Failed to access clipboard via pyperclip: {exc}") from exc
        return str(content or "")

    def list_types(self) -> List[str]:
        return []

    def write(self, content: str, mime_type: str = "text/plain") -> None:
        try:
            pyperclip.copy(content)
        except PyperclipException as exc:
            raise ClipboardToolError(f"pyperclip.copy failed: {exc}") from exc
        logging.debug("Set clipboard text via pyperclip: %s", _describe_text(content))

    def clear(self) -> None:
        try:
            pyperclip.copy("")
        except PyperclipException as exc:
            raise ClipboardToolError(f"pyperclip.copy failed: {exc}") from exc


def detect_clipboard_tools(preferred: Optional[str] = None) -> ClipboardTools:
    """Return the clipboard backend available on this machine.

    ``wl-clipboard`` is preferred whenever both of its tools are on ``PATH``;
    otherwise pyperclip is used and image support is effectively disabled
    because it cannot list MIME types.
    """

    if preferred == PyperclipTools.name:
        return PyperclipTools()

    if shutil.which(WL_PASTE) and shutil.which(WL_COPY):
        return WaylandClipboardTools()

    logging.warning(
        "%s/%s not found on PATH; falling back to pyperclip (text only)",
        WL_PASTE,
        WL_COPY,
    )
    return PyperclipTools()
