# constants.py
# Central constants shared by every bbclip subsystem.

from __future__ import annotations

APP_NAME = "bbclip"
APP_VERSION = "0.6.0"
ORG_DOMAIN = "org.pgml"

# Persistence
HISTORY_FILENAME = f"{ORG_DOMAIN}.{APP_NAME}-hist"
CACHE_SUBDIRECTORY = APP_NAME
CONFIG_SUBDIRECTORY = APP_NAME
CONFIG_FILENAME = f"{APP_NAME}.conf"

# Single instance channel
SOCKET_PATH = f"/tmp/{APP_NAME}.sock"
SHOW_COMMAND = b"SHOW\n"
SIGNAL_READ_SIZE = 16

# History defaults
DEFAULT_MAX_ENTRIES = 100
DEFAULT_TEXT_PREVIEW_LENGTH = 100
DEFAULT_POLL_INTERVAL = 0.3
PRESENT_ITEMS = 20

# External tools
WL_PASTE = "wl-paste"
WL_COPY = "wl-copy"
CLIPBOARD_READ_TIMEOUT = 2.0

# Some image hosts reject urllib's default agent.
HTTP_USER_AGENT = f"Mozilla/5.0 (X11; Linux x86_64) {APP_NAME}/{APP_VERSION} clipboard-history"
HTTP_TIMEOUT = 15.0
