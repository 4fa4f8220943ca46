"""Per-character thumbnail pictures.

`<code>.png` is downloaded from the thumbnails base URL into a subdirectory of
the cache directory, in a QThread worker like the models. A character whose
download failed is not requested again during the session.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

import requests
from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from app.services.asset_loader import fetch_cached_bytes, join_url

logger = logging.getLogger(__name__)

THUMBNAIL_SUBDIR = "thumbnails"

ThumbnailReadyFn = Callable[[str, str], None]  # character, path


def thumbnail_filename(character: str) -> str:
    return "{}.png".format(ord(character))


class _ThumbnailWorker(QObject):
    ready = pyqtSignal(str, str)  # character, path
    failed = pyqtSignal(str, str)  # character, reason
    finished = pyqtSignal()

    def __init__(self, character: str, url: str, cache_path: Path, timeout: float) -> None:
        super().__init__()
        self.character = character
        self.url = url
        self.cache_path = cache_path
        self.timeout = timeout

    @pyqtSlot()
    def run(self) -> None:
        try:
            fetch_cached_bytes(self.url, self.cache_path, timeout=self.timeout)
            self.ready.emit(self.character, str(self.cache_path))
        except (requests.RequestException, OSError) as e:
            self.failed.emit(self.character, str(e))
        finally:
            self.finished.emit()


class ThumbnailLoader(QObject):
    """ThumbnailSource backed by HTTP downloads in worker threads."""

    def __init__(
        self,
        *,
        base_url: str,
        cache_dir: Path,
        timeout: float = 16.0,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._base_url = base_url
        self._dir = Path(cache_dir) / THUMBNAIL_SUBDIR
        self._timeout = float(timeout)
        self._waiters: dict[str, list[ThumbnailReadyFn]] = {}
        self._failed: set[str] = set()
        self._jobs: list[tuple[QThread, _ThumbnailWorker]] = []

    def path_for(self, character: str) -> Path:
        return self._dir / thumbnail_filename(character)

    def cached(self, character: str) -> Optional[str]:
        if not character:
            return None
        p = self.path_for(character)
        if p.is_file() and p.stat().st_size > 0:
            return str(p)
        return None

    def request(self, character: str, on_ready: ThumbnailReadyFn) -> None:
        """Download the thumbnail unless it is cached, loading, or known missing."""
        if not character or character in self._failed:
            return
        path = self.cached(character)
        if path is not None:
            on_ready(character, path)
            return
        waiters = self._waiters.get(character)
        if waiters is not None:
            if on_ready not in waiters:
                waiters.append(on_ready)
            return
        self._waiters[character] = [on_ready]

        url = join_url(self._base_url, thumbnail_filename(character))
        logger.debug("Loading thumbnail %s for %r", url, character)
        worker = _ThumbnailWorker(character, url, self.path_for(character), self._timeout)
        thread = QThread(self)
        worker.moveToThread(thread)
        worker.ready.connect(self._on_ready)
        worker.failed.connect(self._on_failed)
        worker.finished.connect(thread.quit)
        thread.started.connect(worker.run)
        thread.finished.connect(lambda: self._forget(thread))
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        self._jobs.append((thread, worker))
        thread.start()

    def pending(self) -> int:
        return len(self._jobs)

    def _on_ready(self, character: str, path: str) -> None:
        for cb in self._waiters.pop(character, []):
            try:
                cb(character, path)
            except Exception:
                logger.exception("Thumbnail callback failed for %r", character)

    def _on_failed(self, character: str, reason: str) -> None:
        logger.warning("No thumbnail for %r: %s", character, reason)
        self._waiters.pop(character, None)
        self._failed.add(character)

    def _forget(self, thread: QThread) -> None:
        self._jobs = [(t, w) for (t, w) in self._jobs if t is not thread]
