from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from app.domain.errors import AssetLoadError
from app.domain.gltf_bounds import BoundingBox

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetEntry:
    """Measured model for one character."""

    character: str
    bounds: BoundingBox
    model_path: str


ReadyFn = Callable[[AssetEntry], None]
FailedFn = Callable[[AssetLoadError], None]


class AssetLoader(Protocol):
    """Fetches and measures a character model.

    Exactly one of the callbacks is invoked per `load` call, on the GUI thread.
    """

    def load(
        self,
        character: str,
        on_loaded: Callable[[AssetEntry], None],
        on_failed: Callable[[str, str], None],
    ) -> None: ...


class AssetCache:
    """One table of measured models keyed by character.

    - at most one entry per character, never evicted
    - at most one in-flight load per character; later requests for the same
      character wait for that load
    - failed loads are not cached, so a later spawn may retry
    """

    def __init__(self, loader: AssetLoader) -> None:
        self._loader = loader
        self._entries: dict[str, AssetEntry] = {}
        self._pending: dict[str, list[tuple[ReadyFn, Optional[FailedFn]]]] = {}

    def get(self, character: str) -> Optional[AssetEntry]:
        return self._entries.get(character)

    def is_loading(self, character: str) -> bool:
        return character in self._pending

    def __len__(self) -> int:
        return len(self._entries)

    def request(self, character: str, on_ready: ReadyFn, on_failed: Optional[FailedFn] = None) -> None:
        entry = self._entries.get(character)
        if entry is not None:
            on_ready(entry)
            return

        waiters = self._pending.get(character)
        if waiters is not None:
            logger.debug("Joining in-flight load for %r", character)
            waiters.append((on_ready, on_failed))
            return

        self._pending[character] = [(on_ready, on_failed)]
        logger.debug("Fetching model for %r", character)
        self._loader.load(character, self._on_loaded, self._on_failed)

    def _on_loaded(self, entry: AssetEntry) -> None:
        self._entries.setdefault(entry.character, entry)
        stored = self._entries[entry.character]
        for on_ready, _ in self._pending.pop(entry.character, []):
            try:
                on_ready(stored)
            except Exception:
                logger.exception("Asset ready callback failed for %r", entry.character)

    def _on_failed(self, character: str, reason: str) -> None:
        logger.warning("Model load failed for %r: %s", character, reason)
        error = AssetLoadError(character, reason)
        for _, on_failed in self._pending.pop(character, []):
            if on_failed is None:
                continue
            try:
                on_failed(error)
            except Exception:
                logger.exception("Asset failure callback failed for %r", character)
