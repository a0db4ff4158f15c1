"""Shared helpers for configuring the application's logging setup."""

from __future__ import annotations

import logging
import os
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(threadName)s - %(message)s"
LOG_FILENAME = "bbclip.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def _create_formatter() -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT)


def create_stream_handler(stream: IO[str]) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setFormatter(_create_formatter())
    return handler


def create_file_handler(log_file_path: str) -> RotatingFileHandler:
    """Return a rotating file handler writing to *log_file_path*."""

    os.makedirs(os.path.dirname(log_file_path), exist_ok=True)
    handler = RotatingFileHandler(
        log_file_path,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(_create_formatter())
    return handler


def ensure_file_handler(log_file_path: str) -> RotatingFileHandler:
    """Attach a file handler to the root logger if missing."""

    absolute_path = os.path.abspath(log_file_path)
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if isinstance(handler, RotatingFileHandler):
            if os.path.abspath(getattr(handler, "baseFilename", "")) == absolute_path:
                return handler

    handler = create_file_handler(absolute_path)
    root_logger.addHandler(handler)
    return handler


def configure_logging(
    log_dir: Optional[Path] = None,
    *,
    level: int = logging.INFO,
    stream: Optional[IO[str]] = None,
) -> None:
    """Configure the root logger with a console handler and a log file.

    A log directory that cannot be created only costs the file handler; the
    console output keeps working.
    """

    handlers = [create_stream_handler(stream or sys.stderr)]
    logging.basicConfig(level=level, handlers=handlers, force=True)

    if log_dir is None:
        return
    try:
        ensure_file_handler(os.path.join(str(log_dir), LOG_FILENAME))
    except OSError as exc:
        logging.warning("File logging disabled, %s is not writable: %s", log_dir, exc)


def _log_thread_exception(args: threading.ExceptHookArgs) -> None:
    logging.critical(
        "Unhandled exception in thread %s: %s",
        args.thread.name if args.thread else "?",
        args.exc_value,
        exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
    )


def _log_unhandled_exception(exc_type, exc_value, exc_traceback) -> None:
    logging.critical(
        "Unhandled exception: %s", exc_value, exc_info=(exc_type, exc_value, exc_traceback)
    )


def install_exception_hooks() -> None:
    """Route unhandled exceptions of every thread into the log."""

    threading.excepthook = _log_thread_exception
    sys.excepthook = _log_unhandled_exception
