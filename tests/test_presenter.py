import io
import json
import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.history import HistoryStore
from core.image_resolver import path_to_file_uri
from services.presenter import HeadlessPresenter


def _store(tmp_path, values):
    path = tmp_path / "history.json"
    path.write_text(json.dumps(values), encoding="utf-8")
    store = HistoryStore(path)
    store.load()
    return store


def test_render_lists_newest_first_and_truncates(tmp_path):
    store = _store(tmp_path, ["old", "multi\nline   text", "x" * 50])
    presenter = HeadlessPresenter(store, preview_length=10)

    lines = presenter.render()

    assert lines == [
        "  0  " + "x" * 7 + "...",
        "  1  multi l...",
        "  2  old",
    ]


def test_render_labels_images(tmp_path):
    picture = tmp_path / "p.png"
    picture.write_bytes(b"0" * 2048)
    store = _store(tmp_path, [path_to_file_uri(str(picture))])

    (line,) = HeadlessPresenter(store, preview_length=500).render()

    assert line.startswith("  0  [image 2.00 KB] file://")


def test_render_respects_limit(tmp_path):
    store = _store(tmp_path, [str(i) for i in range(30)])

    lines = HeadlessPresenter(store, limit=5).render()

    assert [line.split()[1] for line in lines] == ["29", "28", "27", "26", "25"]


def test_present_writes_to_stream(tmp_path):
    stream = io.StringIO()
    HeadlessPresenter(_store(tmp_path, []), stream=stream).present()
    assert stream.getvalue() == "(clipboard history is empty)\n"

    stream = io.StringIO()
    HeadlessPresenter(_store(tmp_path, ["a"]), stream=stream).present()
    assert stream.getvalue() == "  0  a\n"
