import io
import logging
import pathlib
import sys
import uuid
from logging.handlers import RotatingFileHandler

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from utils.logging_helpers import log_user_notice
from utils.logging_setup import (
    LOG_FILENAME,
    create_stream_handler,
    ensure_file_handler,
)


def _build_logger():
    stream = io.StringIO()
    handler = create_stream_handler(stream)
    logger = logging.getLogger(f"test_logger_{uuid.uuid4()}")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.handlers = [handler]
    return logger, stream


def test_stream_handler_includes_level_and_thread():
    logger, stream = _build_logger()
    logger.info("clipboard captured")
    output = stream.getvalue().strip()
    assert " - INFO - MainThread - clipboard captured" in output


def test_file_handler_attached_once(tmp_path):
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    log_path = str(tmp_path / "logs" / LOG_FILENAME)
    try:
        first = ensure_file_handler(log_path)
        second = ensure_file_handler(log_path)
        assert first is second
        assert isinstance(first, RotatingFileHandler)
        assert (tmp_path / "logs").is_dir()
    finally:
        for handler in root_logger.handlers[:]:
            if handler not in original_handlers:
                root_logger.removeHandler(handler)
                handler.close()


def test_user_notice_printed_when_info_hidden(capsys):
    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.setLevel(logging.WARNING)
    try:
        log_user_notice("Another instance already running (%s)", "pid 42")
    finally:
        root_logger.setLevel(original_level)

    assert capsys.readouterr().out == "Another instance already running (pid 42)\n"


def test_user_notice_not_printed_when_info_visible(capsys):
    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.setLevel(logging.INFO)
    try:
        log_user_notice("visible through logging")
    finally:
        root_logger.setLevel(original_level)

    assert capsys.readouterr().out == ""
