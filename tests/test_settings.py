import logging
import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from config.constants import DEFAULT_MAX_ENTRIES, SOCKET_PATH
from config.settings import Settings, load_settings, parse_settings


def test_defaults_when_file_is_missing(tmp_path):
    assert load_settings(tmp_path / "absent.conf") == Settings()


def test_values_are_parsed(tmp_path):
    path = tmp_path / "bbclip.conf"
    path.write_text(
        "max-entries = 250\n"
        "image-support = true\n"
        "silent=yes\n"
        "text-preview-length = 40\n"
        "poll-interval = 0.5\n"
        "layer-shell = false\n",
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.max_entries == 250
    assert settings.image_support is True
    assert settings.silent is True
    assert settings.text_preview_length == 40
    assert settings.poll_interval == 0.5
    assert settings.socket_path == SOCKET_PATH


def test_invalid_values_fall_back_to_defaults(caplog):
    with caplog.at_level(logging.WARNING):
        settings = parse_settings("max-entries = lots\nimage-support = maybe\n")

    assert settings.max_entries == DEFAULT_MAX_ENTRIES
    assert settings.image_support is False
    assert "max-entries" in caplog.text


def test_non_positive_limits_are_rejected():
    settings = parse_settings("max-entries = 0\npoll-interval = -1\n")

    assert settings.max_entries == DEFAULT_MAX_ENTRIES
    assert settings.poll_interval == Settings().poll_interval


def test_unreadable_text_returns_defaults():
    assert parse_settings("just some words without equals\n") == Settings()


def test_overrides_ignore_none():
    settings = Settings(max_entries=10).with_overrides(
        {"max_entries": None, "silent": True, "unknown": 1}
    )

    assert settings.max_entries == 10
    assert settings.silent is True
