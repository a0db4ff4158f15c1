# main.py
# Entry point of the bbclip clipboard history daemon.

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from typing import Optional, Sequence

from config.constants import APP_NAME, APP_VERSION
from config.settings import Settings, load_settings
from core.cache_janitor import CacheJanitor
from core.errors import HistoryPersistenceError
from core.history import HistoryStore
from core.image_resolver import ImageResolver
from services.clipboard_poller import ClipboardPoller
from services.instance_signal import InstanceSignal, Role
from services.presenter import HeadlessPresenter
from utils.clipboard_tools import detect_clipboard_tools
from utils.logging_helpers import log_user_notice
from utils.logging_setup import configure_logging, install_exception_hooks
from utils.path_helpers import (
    resolve_cache_directory,
    resolve_history_file,
    resolve_log_directory,
)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_NAME, description="Clipboard history daemon")
    parser.add_argument("--version", action="store_true", help="Shows the version")
    parser.add_argument("--clear-history", action="store_true", help="Clears the history")
    parser.add_argument(
        "--max-entries",
        type=int,
        default=None,
        help="Maximum amount of clipboard entries the history should hold",
    )
    parser.add_argument(
        "--image-support",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Whether to enable image support",
    )
    parser.add_argument(
        "--silent",
        action="store_const",
        const=True,
        default=None,
        help="Starts silently in the background",
    )
    parser.add_argument(
        "--text-preview-length",
        type=int,
        default=None,
        help="The length of the preview text before it's truncated",
    )
    parser.add_argument("--verbose", action="store_true", help="Enables debug logging")
    return parser


def resolve_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Merge command line flags over the configuration file values."""

    settings = base if base is not None else load_settings()
    merged = settings.with_overrides(
        {
            "max_entries": args.max_entries,
            "image_support": args.image_support,
            "silent": args.silent,
            "text_preview_length": args.text_preview_length,
        }
    )
    if merged.max_entries < 1:
        logging.warning("Ignoring --max-entries %s; keeping %s", merged.max_entries, settings.max_entries)
        merged = merged.with_overrides({"max_entries": settings.max_entries})
    return merged


def setup_exit_handler(stop_event: threading.Event) -> None:
    """Sets up handlers for graceful shutdown on signals."""

    def signal_handler(signum, frame):
        logging.info("Shutdown signal (%s) received", signal.Signals(signum).name)
        stop_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.version:
        print(f"{APP_NAME} {APP_VERSION}")
        return 0

    configure_logging(resolve_log_directory(), level=logging.DEBUG if args.verbose else logging.INFO)
    install_exception_hooks()
    settings = resolve_settings(args)

    instance = InstanceSignal(settings.socket_path)
    if instance.acquire() is Role.SECONDARY:
        log_user_notice("Another instance already running. Exiting.")
        return 0

    tools = detect_clipboard_tools()
    cache_dir = resolve_cache_directory()
    store = HistoryStore(resolve_history_file(), settings.max_entries, clipboard=tools)
    try:
        store.ensure_storage()
        cache_dir.mkdir(parents=True, exist_ok=True)
    except (HistoryPersistenceError, OSError) as exc:
        logging.critical("Cannot start without a writable data directory: %s", exc)
        instance.close()
        return 1

    if args.clear_history:
        store.clear()
    store.load()
    store.trim_to_capacity()
    CacheJanitor(store, cache_dir).clean()

    resolver = ImageResolver(tools, cache_dir) if settings.image_support else None
    poller = ClipboardPoller(store, tools, resolver, interval=settings.poll_interval)
    presenter = HeadlessPresenter(store, preview_length=settings.text_preview_length)

    instance.set_on_show(presenter.present)
    poller.start()
    instance.start()

    if not settings.silent:
        presenter.present()

    stop_event = threading.Event()
    setup_exit_handler(stop_event)
    logging.info("%s %s running with %d entries", APP_NAME, APP_VERSION, len(store))
    while not stop_event.is_set():
        stop_event.wait(1.0)

    poller.stop()
    instance.close()
    logging.info("%s stopped", APP_NAME)
    return 0


if __name__ == "__main__":
    sys.exit(main())
