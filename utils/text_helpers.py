"""Small formatting helpers used when presenting history entries."""

from __future__ import annotations

from typing import Optional

ELLIPSIS = "..."


def truncate_text(text: str, max_width: int) -> str:
    """Shorten *text* to *max_width* characters, ending in ``...`` if room."""

    if max_width < 0:
        max_width = 0
    if len(text) <= max_width:
        return text
    if max_width > len(ELLIPSIS):
        return text[: max_width - len(ELLIPSIS)] + ELLIPSIS
    return text[:max_width]


def single_line(text: str) -> str:
    return " ".join(text.split())


def clamp(value: int, lower: int, upper: int) -> int:
    return min(max(value, lower), upper)


def format_bytes(num: Optional[int]) -> str:
    if num is None:
        return "?"
    size = float(num)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024.0 or unit == "TB":
            if unit == "B":
                return f"{int(size)} {unit}"
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} PB"
