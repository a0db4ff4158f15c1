"""Single-instance enforcement over a local unix socket.

The first process binds the well-known socket path and becomes the primary
instance. Later invocations find the address in use, send ``SHOW\\n`` and
exit; the primary reacts by running its "refresh and present" callback.
"""

from __future__ import annotations

import enum
import errno
import logging
import os
import socket
import threading
from typing import Callable, Optional

from config.constants import SHOW_COMMAND, SIGNAL_READ_SIZE, SOCKET_PATH

ShowCallback = Callable[[], None]

ACCEPT_POLL_SECONDS = 0.5
CLIENT_TIMEOUT_SECONDS = 1.0


class Role(enum.Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


def notify_running_instance(socket_path: str = SOCKET_PATH) -> bool:
    """Ask a running instance to present itself; ``True`` if the write succeeded."""

    try:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(CLIENT_TIMEOUT_SECONDS)
            sock.connect(socket_path)
            sock.sendall(SHOW_COMMAND)
    except OSError as exc:
        logging.debug("No running instance reachable at %s: %s", socket_path, exc)
        return False
    return True


class InstanceSignal:
    """Listening half of the wakeup channel."""

    def __init__(
        self,
        socket_path: str = SOCKET_PATH,
        on_show: Optional[ShowCallback] = None,
    ) -> None:
        self.socket_path = socket_path
        self._on_show = on_show
        self._server: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    def set_on_show(self, callback: Optional[ShowCallback]) -> None:
        self._on_show = callback

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------
    def acquire(self) -> Role:
        """Become the listening endpoint or wake the instance that already is."""

        try:
            self._server = self._bind()
        except OSError as exc:
            if exc.errno != errno.EADDRINUSE:
                raise
            if notify_running_instance(self.socket_path):
                logging.info("Another instance owns %s; sent wakeup signal", self.socket_path)
                return Role.SECONDARY
            # Nobody answers: a crashed instance left its socket file behind.
            logging.info("Removing stale socket %s", self.socket_path)
            try:
                os.unlink(self.socket_path)
            except FileNotFoundError:
                pass
            self._server = self._bind()

        logging.info("Listening for wakeup signals on %s", self.socket_path)
        return Role.PRIMARY

    def _bind(self) -> socket.socket:
        server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            server.bind(self.socket_path)
            server.listen(4)
            server.settimeout(ACCEPT_POLL_SECONDS)
        except OSError:
            server.close()
            raise
        return server

    # ------------------------------------------------------------------
    # Accept loop
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._server is None:
            raise RuntimeError("acquire() must return Role.PRIMARY before start()")
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self.serve_forever,
            name="InstanceSignal",
            daemon=True,
        )
        self._thread.start()

    def serve_forever(self) -> None:
        server = self._server
        if server is None:
            return
        while not self._stop_event.is_set():
            try:
                conn, _ = server.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self._stop_event.is_set():
                    break
                logging.warning("Accepting wakeup connection failed: %s", exc)
                continue
            with conn:
                self._handle_connection(conn)

    def _handle_connection(self, conn: socket.socket) -> None:
        conn.settimeout(CLIENT_TIMEOUT_SECONDS)
        payload = b""
        try:
            while len(payload) < SIGNAL_READ_SIZE:
                chunk = conn.recv(SIGNAL_READ_SIZE - len(payload))
                if not chunk:
                    break
                payload += chunk
                if payload.endswith(b"\n"):
                    break
        except OSError as exc:
            logging.debug("Ignoring unreadable wakeup connection: %s", exc)
            return

        if payload != SHOW_COMMAND:
            logging.debug("Ignoring unknown wakeup payload %r", payload)
            return

        callback = self._on_show
        if callback is None:
            return
        try:
            callback()
        except Exception:
            logging.exception("Show callback failed")

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------
    def close(self) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread and thread.is_alive() and threading.current_thread() is not thread:
            thread.join(timeout=ACCEPT_POLL_SECONDS * 4)
        self._thread = None

        server = self._server
        self._server = None
        if server is None:
            return
        server.close()
        try:
            os.unlink(self.socket_path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logging.warning("Failed to remove socket %s: %s", self.socket_path, exc)
