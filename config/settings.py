# settings.py
# User configuration read from bbclip.conf with configparser.
#
# The file holds plain ``key = value`` lines without a section header, e.g.:
#
#     max-entries = 200
#     image-support = true

from __future__ import annotations

import configparser
import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

from config.constants import (
    DEFAULT_MAX_ENTRIES,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TEXT_PREVIEW_LENGTH,
    SOCKET_PATH,
)

_SECTION = "bbclip"


@dataclass(frozen=True)
class Settings:
    max_entries: int = DEFAULT_MAX_ENTRIES
    image_support: bool = False
    silent: bool = False
    text_preview_length: int = DEFAULT_TEXT_PREVIEW_LENGTH
    poll_interval: float = DEFAULT_POLL_INTERVAL
    socket_path: str = SOCKET_PATH

    def with_overrides(self, overrides: Mapping[str, Any]) -> "Settings":
        """Return a copy where every non-``None`` override replaces the value."""

        known = {item.name for item in fields(self)}
        changes = {
            key: value
            for key, value in overrides.items()
            if key in known and value is not None
        }
        return replace(self, **changes)


def _option_name(field_name: str) -> str:
    return field_name.replace("_", "-")


def _parse_text(text: str) -> configparser.SectionProxy:
    parser = configparser.ConfigParser(interpolation=None)
    parser.read_string(f"[{_SECTION}]\n{text}")
    return parser[_SECTION]


def parse_settings(text: str) -> Settings:
    """Build :class:`Settings` from config file text.

    Unknown keys are ignored. Values that cannot be converted keep their
    default and a warning is logged so a typo never prevents startup.
    """

    defaults = Settings()
    try:
        section = _parse_text(text)
    except configparser.Error as exc:
        logging.warning("Ignoring unreadable configuration: %s", exc)
        return defaults

    values: dict[str, Any] = {}
    for item in fields(Settings):
        option = _option_name(item.name)
        if option not in section:
            continue
        default = getattr(defaults, item.name)
        try:
            if isinstance(default, bool):
                values[item.name] = section.getboolean(option)
            elif isinstance(default, int):
                values[item.name] = section.getint(option)
            elif isinstance(default, float):
                values[item.name] = section.getfloat(option)
            else:
                values[item.name] = section.get(option)
        except ValueError:
            logging.warning(
                "Invalid value %r for %s; using default %r",
                section.get(option),
                option,
                default,
            )

    if values.get("max_entries", 1) < 1:
        logging.warning("max-entries must be positive; using default %s", DEFAULT_MAX_ENTRIES)
        values.pop("max_entries")
    if values.get("poll_interval", 1.0) <= 0:
        logging.warning("poll-interval must be positive; using default %s", DEFAULT_POLL_INTERVAL)
        values.pop("poll_interval")

    return replace(defaults, **values)


def load_settings(path: Optional[os.PathLike] = None) -> Settings:
    """Read the user configuration file, returning defaults when absent."""

    if path is None:
        from utils.path_helpers import resolve_config_file

        path = resolve_config_file()

    try:
        with open(path, "r", encoding="utf-8") as handle:
            text = handle.read()
    except FileNotFoundError:
        logging.debug("No configuration file at %s; using defaults", path)
        return Settings()
    except OSError as exc:
        logging.warning("Failed to read configuration file %s: %s", path, exc)
        return Settings()

    return parse_settings(text)
