import os
import pathlib
import sys
import tempfile
import threading

import pytest

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import main
from config.constants import APP_NAME, APP_VERSION
from config.settings import Settings
from services.instance_signal import InstanceSignal


def _parse(*argv):
    return main.build_arg_parser().parse_args(list(argv))


def test_version_flag_prints_version(capsys):
    assert main.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == f"{APP_NAME} {APP_VERSION}"


def test_flags_override_config_values():
    base = Settings(max_entries=50, image_support=True, text_preview_length=80)

    settings = main.resolve_settings(
        _parse("--max-entries", "10", "--no-image-support", "--silent"), base
    )

    assert settings.max_entries == 10
    assert settings.image_support is False
    assert settings.silent is True
    assert settings.text_preview_length == 80


def test_absent_flags_keep_config_values():
    base = Settings(max_entries=50, image_support=True, silent=True)

    assert main.resolve_settings(_parse(), base) == base


def test_invalid_max_entries_flag_is_ignored():
    base = Settings(max_entries=50)

    assert main.resolve_settings(_parse("--max-entries", "0"), base).max_entries == 50


@pytest.fixture
def socket_path():
    directory = tempfile.mkdtemp(prefix="bbm")
    path = os.path.join(directory, "s.sock")
    yield path
    if os.path.exists(path):
        os.unlink(path)
    os.rmdir(directory)


def test_second_invocation_signals_and_exits(monkeypatch, socket_path):
    monkeypatch.setattr(main, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(main, "install_exception_hooks", lambda: None)
    monkeypatch.setattr(main, "load_settings", lambda: Settings(socket_path=socket_path))

    shown = threading.Event()
    primary = InstanceSignal(socket_path, on_show=shown.set)
    primary.acquire()
    primary.start()
    try:
        assert main.main([]) == 0
        assert shown.wait(timeout=2.0)
    finally:
        primary.close()
