"""Startup cleanup of cached images no longer referenced by the history."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from core.history import HistoryStore
from core.image_resolver import path_to_file_uri


@dataclass
class JanitorReport:
    kept: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class CacheJanitor:
    """Reconcile the image cache directory with the live history."""

    def __init__(self, store: HistoryStore, cache_dir: os.PathLike) -> None:
        self._store = store
        self.cache_dir = Path(cache_dir)

    def clean(self) -> JanitorReport:
        report = JanitorReport()
        try:
            names = sorted(os.listdir(self.cache_dir))
        except FileNotFoundError:
            return report
        except OSError as exc:
            logging.warning("Failed to list image cache %s: %s", self.cache_dir, exc)
            return report

        for name in names:
            path = self.cache_dir / name
            if not path.is_file():
                continue
            found, _ = self._store.contains(path_to_file_uri(str(path)))
            if found:
                report.kept.append(str(path))
                continue
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                logging.warning("Failed to remove cached image %s: %s", path, exc)
                report.failed.append(str(path))
                continue
            report.removed.append(str(path))

        if report.removed:
            logging.info(
                "Removed %d orphaned images from %s", len(report.removed), self.cache_dir
            )
        return report
