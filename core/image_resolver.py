"""Classify clipboard payloads and materialize image files locally.

Images reach the clipboard in three ways:

* dragged or copied from a web page; the payload is an HTML fragment with an
  ``<img>`` tag and the clipboard offers a ``-moz-url`` type,
* copied in a file manager; the clipboard offers ``text/uri-list``,
* raw ``image/*`` data offered directly.

Browser images are downloaded once into the cache directory and named by the
basename of their URL, so copying the same picture again reuses the file.
"""

from __future__ import annotations

import http.client
import logging
import os
import posixpath
import re
import urllib.parse
import urllib.request
from dataclasses import replace
from pathlib import Path
from typing import Optional

from config.constants import HTTP_TIMEOUT, HTTP_USER_AGENT
from core.errors import ClipboardToolError, ImageFetchError
from core.models import (
    FILE_SCHEME,
    GENERIC_IMAGE_MIME,
    ImageEntry,
    ImageMeta,
    ImageSource,
)
from utils.clipboard_tools import ClipboardTools

BROWSER_MARKER = "-moz-url"
URI_LIST_MIME = "text/uri-list"
IMAGE_MIME_PREFIX = "image/"

_IMG_SRC_PATTERN = re.compile(r"""(?i)<img[^>]+src=["']?([^"' >]+)["']?""")
_URI_SAFE_CHARS = "/!$&'()*+,;=:@~"


def extract_img_src(fragment: str) -> str:
    """Return the ``src`` attribute of the first ``<img>`` tag, or ``""``."""

    match = _IMG_SRC_PATTERN.search(fragment)
    if match:
        return match.group(1)
    return ""


def strip_query(url: str) -> str:
    return url.split("?", 1)[0]


def path_to_file_uri(path: str) -> str:
    """Build a ``file://`` URI with the path in forward-slash form."""

    if path.startswith(FILE_SCHEME):
        return path
    normalized = path.replace(os.sep, "/")
    return FILE_SCHEME + urllib.parse.quote(normalized, safe=_URI_SAFE_CHARS)


def file_uri_to_path(uri: str) -> Optional[str]:
    """Return the local path of a ``file://`` URI, ``None`` for anything else."""

    try:
        parsed = urllib.parse.urlparse(uri)
    except ValueError:
        return None
    if parsed.scheme != "file" or not parsed.path:
        return None
    return urllib.parse.unquote(parsed.path)


class ImageResolver:
    """Detect image clipboard content and provide a local file for it."""

    def __init__(
        self,
        tools: ClipboardTools,
        cache_dir: os.PathLike,
        *,
        user_agent: str = HTTP_USER_AGENT,
        timeout: float = HTTP_TIMEOUT,
    ) -> None:
        self._tools = tools
        self.cache_dir = Path(cache_dir)
        self._user_agent = user_agent
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------
    def probe(self) -> Optional[ImageMeta]:
        """Inspect the offered MIME types; ``None`` when no image is present."""

        try:
            offered = self._tools.list_types()
        except ClipboardToolError as exc:
            logging.debug("Clipboard type listing failed: %s", exc)
            return None
        return classify_mime_types(offered)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def cache_path_for(self, url: str) -> Path:
        name = posixpath.basename(strip_query(url))
        return self.cache_dir / name

    def _locate(self, raw: str, meta: ImageMeta) -> ImageMeta:
        if meta.source is ImageSource.BROWSER:
            origin = extract_img_src(raw)
            return replace(meta, origin=origin, local_path=str(self.cache_path_for(origin)))
        return replace(meta, source=ImageSource.FILE_SYSTEM, local_path=raw)

    def file_uri(self, raw: str, meta: ImageMeta) -> str:
        """Return the canonical ``file://`` URI for *raw* without any I/O."""

        if raw.startswith(FILE_SCHEME):
            return raw
        return path_to_file_uri(self._locate(raw, meta).local_path)

    def fallback_text(self, raw: str, meta: ImageMeta) -> Optional[str]:
        """Text stored for a browser image whose download failed.

        ``None`` for sources that never download.
        """

        if meta.source is not ImageSource.BROWSER or raw.startswith(FILE_SCHEME):
            return None
        return extract_img_src(raw) or raw

    def resolve(self, raw: str, meta: ImageMeta) -> ImageEntry:
        """Build the history entry for image content, downloading if needed.

        Raises :class:`ImageFetchError` when a browser image cannot be
        fetched into the cache.
        """

        if raw.startswith(FILE_SCHEME):
            local = file_uri_to_path(raw) or ""
            located = replace(
                meta,
                source=meta.source or ImageSource.FILE_SYSTEM,
                local_path=local,
                size_bytes=_file_size(local),
            )
            return ImageEntry(raw, located)

        located = self._locate(raw, meta)
        if located.source is ImageSource.BROWSER:
            size = self._materialize(located.origin, Path(located.local_path))
        else:
            size = _file_size(located.local_path)
        located = replace(located, size_bytes=size)
        return ImageEntry(path_to_file_uri(located.local_path), located)

    def _materialize(self, origin: str, target: Path) -> int:
        if not origin:
            raise ImageFetchError("Browser image without a src attribute", origin=origin)
        if target.is_file():
            logging.debug("Reusing cached image %s for %s", target, origin)
            return _file_size(str(target))
        return self.download(origin, target)

    def download(self, url: str, target: Path) -> int:
        """Fetch *url* once into *target* and return the number of bytes."""

        request = urllib.request.Request(url, headers={"User-Agent": self._user_agent})
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with urllib.request.urlopen(request, timeout=self._timeout) as response:
                data = response.read()
            with open(target, "wb") as handle:
                handle.write(data)
        except (OSError, ValueError, http.client.HTTPException) as exc:
            logging.error("Failed to download clipboard image from %s: %s", url, exc)
            try:
                if target.exists():
                    target.unlink()
            except OSError:
                logging.debug("Could not remove partial download %s", target)
            raise ImageFetchError(f"Failed to download {url}", origin=url, cause=exc) from exc

        logging.info("Cached clipboard image %s (%d bytes)", target.name, len(data))
        return len(data)


def classify_mime_types(offered: list[str]) -> Optional[ImageMeta]:
    """Map a clipboard MIME listing to image metadata.

    The first line carrying one of the recognised signals decides the result.
    A raw ``image/*`` type leaves the source unset; it is treated as a local
    file when resolved.
    """

    for line in offered:
        source: Optional[ImageSource] = None
        mime_type = ""
        if line.startswith(BROWSER_MARKER):
            source = ImageSource.BROWSER
            mime_type = GENERIC_IMAGE_MIME
        elif line.startswith(URI_LIST_MIME):
            source = ImageSource.FILE_SYSTEM
            mime_type = GENERIC_IMAGE_MIME
        if line.startswith(IMAGE_MIME_PREFIX):
            mime_type = line
        if mime_type:
            return ImageMeta(source=source, mime_type=mime_type)
    return None


def _file_size(path: str) -> int:
    try:
        return os.path.getsize(path)
    except OSError:
        return 0
