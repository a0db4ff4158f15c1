"""In-memory clipboard backend used by the test-suite."""

import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from core.errors import ClipboardToolError
from utils.clipboard_tools import ClipboardTools


class FakeClipboardTools(ClipboardTools):
    name = "fake"

    def __init__(self, text="", types=None):
        self.text = text
        self.types = list(types or [])
        self.writes = []
        self.clears = 0
        self.fail_read = False
        self.fail_write = False
        self.reads = 0

    def read_text(self):
        self.reads += 1
        if self.fail_read:
            raise ClipboardToolError("wl-paste is not installed")
        return self.text

    def list_types(self):
        return list(self.types)

    def write(self, content, mime_type="text/plain"):
        if self.fail_write:
            raise ClipboardToolError("wl-copy is not installed")
        self.writes.append((content, mime_type))
        self.text = content

    def clear(self):
        if self.fail_write:
            raise ClipboardToolError("wl-copy is not installed")
        self.clears += 1
        self.text = ""
