"""Remote character-model loader.

Downloads `<code>.glb` for a character from the configured models base URL,
keeps a copy in the local cache directory, and measures its bounding box.
The download runs in a QThread worker; results come back to the GUI thread
through Qt signals.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urljoin

import requests
from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from app.domain.gltf_bounds import BoundingBox, compute_bounds
from app.services.asset_cache import AssetEntry

logger = logging.getLogger(__name__)


def model_filename(character: str) -> str:
    return "{}.glb".format(ord(character))


def join_url(base_url: str, filename: str) -> str:
    base = base_url if base_url.endswith("/") else base_url + "/"
    return urljoin(base, filename)


def model_url(base_url: str, character: str) -> str:
    return join_url(base_url, model_filename(character))


def fetch_cached_bytes(url: str, cache_path: Path, *, timeout: float = 16.0) -> bytes:
    """Return the bytes at `url`, using `cache_path` when already downloaded.

    Raises requests.RequestException / OSError on failure.
    """
    if cache_path.exists() and cache_path.is_file() and cache_path.stat().st_size > 0:
        return cache_path.read_bytes()

    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    data = resp.content
    if not data:
        raise requests.RequestException("Empty response from {}".format(url))

    cache_path.parent.mkdir(parents=True, exist_ok=True)
    tmp = cache_path.with_suffix(cache_path.suffix + ".tmp")
    with open(tmp, "wb") as f:
        f.write(data)
    os.replace(str(tmp), str(cache_path))
    return data


class _FetchWorker(QObject):
    ready = pyqtSignal(str, object, str)  # character, BoundingBox, path
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
            data = fetch_cached_bytes(self.url, self.cache_path, timeout=self.timeout)
            bounds = compute_bounds(data)
            self.ready.emit(self.character, bounds, str(self.cache_path))
        except (requests.RequestException, OSError, ValueError) as e:
            self.failed.emit(self.character, str(e))
        finally:
            self.finished.emit()


class RemoteAssetLoader(QObject):
    """AssetLoader backed by HTTP downloads in worker threads."""

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
        self._cache_dir = Path(cache_dir)
        self._timeout = float(timeout)
        # Keep thread/worker pairs alive until they finish.
        self._jobs: list[tuple[QThread, _FetchWorker]] = []

    def load(
        self,
        character: str,
        on_loaded: Callable[[AssetEntry], None],
        on_failed: Callable[[str, str], None],
    ) -> None:
        url = model_url(self._base_url, character)
        path = self._cache_dir / model_filename(character)
        logger.info("Loading model %s for %r", url, character)

        worker = _FetchWorker(character, url, path, self._timeout)
        thread = QThread(self)
        worker.moveToThread(thread)

        def _ready(ch: str, bounds: BoundingBox, p: str) -> None:
            on_loaded(AssetEntry(character=ch, bounds=bounds, model_path=p))

        worker.ready.connect(_ready)
        worker.failed.connect(on_failed)
        worker.finished.connect(thread.quit)
        thread.started.connect(worker.run)
        thread.finished.connect(lambda: self._forget(thread))
        thread.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        self._jobs.append((thread, worker))
        thread.start()

    def pending(self) -> int:
        return len(self._jobs)

    def _forget(self, thread: QThread) -> None:
        self._jobs = [(t, w) for (t, w) in self._jobs if t is not thread]
