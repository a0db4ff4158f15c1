"""Path resolution helpers shared across the application."""

from __future__ import annotations

import os
from pathlib import Path

from PySide6.QtCore import QStandardPaths

from config.constants import (
    CACHE_SUBDIRECTORY,
    CONFIG_FILENAME,
    CONFIG_SUBDIRECTORY,
    HISTORY_FILENAME,
)


def _writable_location(location: QStandardPaths.StandardLocation, env_var: str, fallback: str) -> Path:
    """Return a writable standard location with an XDG style fallback.

    ``Qt`` may report an empty string when the platform has no notion of the
    requested location. In that case the matching XDG environment variable is
    consulted and finally the conventional directory under the user's home.
    """

    path = QStandardPaths.writableLocation(location)
    if not path:
        path = os.environ.get(env_var) or os.path.join(Path.home(), fallback)

    resolved = Path(path)
    if not resolved.is_absolute():
        resolved = (Path.home() / resolved).resolve()
    return resolved


def resolve_data_directory() -> Path:
    return _writable_location(
        QStandardPaths.GenericDataLocation, "XDG_DATA_HOME", os.path.join(".local", "share")
    )


def resolve_cache_directory() -> Path:
    """Return the per-user image cache directory (not created)."""

    base = _writable_location(QStandardPaths.GenericCacheLocation, "XDG_CACHE_HOME", ".cache")
    return base / CACHE_SUBDIRECTORY


def resolve_config_file() -> Path:
    base = _writable_location(QStandardPaths.GenericConfigLocation, "XDG_CONFIG_HOME", ".config")
    return base / CONFIG_SUBDIRECTORY / CONFIG_FILENAME


def resolve_history_file() -> Path:
    return resolve_data_directory() / HISTORY_FILENAME


def resolve_log_directory() -> Path:
    return resolve_data_directory() / CONFIG_SUBDIRECTORY / "logs"
