"""Console-visible status messages for the headless daemon."""

from __future__ import annotations

import logging
import sys
from typing import Any


def log_user_notice(message: str, *args: Any) -> None:
    """Log *message* at INFO and echo it to stdout when INFO is filtered.

    Status lines such as "already running" must reach the person who started
    the process even when the root logger only emits warnings.
    """

    root_logger = logging.getLogger()
    root_logger.info(message, *args)

    if root_logger.getEffectiveLevel() <= logging.INFO:
        return

    try:
        formatted = message % args if args else message
    except (TypeError, ValueError):
        formatted = message
    print(formatted, file=sys.stdout, flush=True)
