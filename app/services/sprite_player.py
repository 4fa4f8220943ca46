"""Audio-sprite playback.

All syllable recordings live in one sound file. A sprite map (data/sprite.yaml)
gives each `<syllable><tone>` key a `[start_ms, duration_ms]` segment.

Playing a segment starts a fresh clip at the segment offset and schedules a
one-shot stop after its duration. Clips are independent: a new request while
another clip is sounding simply overlaps it.

Tests inject a `clip_factory` so no multimedia backend is needed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

import yaml
from PyQt6.QtCore import QObject, QTimer, QUrl

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpriteSegment:
    start_ms: int
    duration_ms: int


class AudioSprite:
    """Key -> segment lookup loaded from YAML."""

    def __init__(self, segments: Optional[dict[str, SpriteSegment]] = None) -> None:
        self._segments: dict[str, SpriteSegment] = dict(segments or {})

    def __contains__(self, key: object) -> bool:
        return key in self._segments

    def __len__(self) -> int:
        return len(self._segments)

    def get(self, key: str) -> Optional[SpriteSegment]:
        return self._segments.get(key)

    @classmethod
    def load(cls, path: Path) -> "AudioSprite":
        try:
            if not path.exists():
                logger.warning("Sprite map missing: %s", path)
                return cls()
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeError, yaml.YAMLError) as e:
            logger.warning("Failed to read sprite map %s: %s", path, e)
            return cls()

        segments: dict[str, SpriteSegment] = {}
        if isinstance(data, dict):
            for key, value in data.items():
                seg = cls._parse_segment(value)
                if seg is None:
                    logger.debug("Skipping malformed sprite entry %r", key)
                    continue
                segments[str(key)] = seg
        return cls(segments)

    @staticmethod
    def _parse_segment(value: Any) -> Optional[SpriteSegment]:
        if not isinstance(value, (list, tuple)) or len(value) < 2:
            return None
        try:
            start, duration = int(value[0]), int(value[1])
        except (TypeError, ValueError):
            return None
        if start < 0 or duration <= 0:
            return None
        return SpriteSegment(start_ms=start, duration_ms=duration)


class Clip(Protocol):
    def play_from(self, position_ms: int) -> None: ...

    def stop(self) -> None: ...


ClipFactory = Callable[[Path], Clip]


class _SilentClip:
    def play_from(self, position_ms: int) -> None:
        pass

    def stop(self) -> None:
        pass


class _QtClip:
    """One QMediaPlayer positioned at a segment offset."""

    def __init__(self, path: Path) -> None:
        from PyQt6.QtMultimedia import QAudioOutput, QMediaPlayer

        self._player = QMediaPlayer()
        self._output = QAudioOutput()
        self._output.setVolume(1.0)
        self._player.setAudioOutput(self._output)
        self._player.setSource(QUrl.fromLocalFile(str(path)))
        self._start_ms = 0
        self._loaded_status = QMediaPlayer.MediaStatus.LoadedMedia

    def play_from(self, position_ms: int) -> None:
        self._start_ms = int(position_ms)
        if self._player.mediaStatus() == self._loaded_status:
            self._seek_and_play()
            return
        self._player.mediaStatusChanged.connect(self._on_status)

    def _on_status(self, status) -> None:
        if status != self._loaded_status:
            return
        try:
            self._player.mediaStatusChanged.disconnect(self._on_status)
        except (TypeError, RuntimeError):
            pass
        self._seek_and_play()

    def _seek_and_play(self) -> None:
        self._player.setPosition(self._start_ms)
        self._player.play()

    def stop(self) -> None:
        self._player.stop()


def default_clip_factory(path: Path) -> Clip:
    if str(os.environ.get("HANZI_TEST_MODE", "")).strip().lower() in ("1", "true", "yes", "on"):
        return _SilentClip()
    if not path.exists():
        logger.warning("Sound file missing: %s", path)
        return _SilentClip()
    try:
        return _QtClip(path)
    except ImportError as e:
        logger.warning("QtMultimedia unavailable: %s", e)
        return _SilentClip()


class SpritePlayer(QObject):
    """Plays sprite segments from one sound file with timed stops."""

    def __init__(
        self,
        sound_path: Path,
        *,
        clip_factory: Optional[ClipFactory] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._sound_path = Path(sound_path)
        self._factory: ClipFactory = clip_factory or default_clip_factory
        # Clips must stay referenced until stopped.
        self._active: list[Clip] = []

    def active_count(self) -> int:
        return len(self._active)

    def play(self, segment: SpriteSegment) -> None:
        clip = self._factory(self._sound_path)
        self._active.append(clip)
        clip.play_from(segment.start_ms)
        QTimer.singleShot(max(0, int(segment.duration_ms)), lambda: self._finish(clip))

    def _finish(self, clip: Clip) -> None:
        try:
            clip.stop()
        except RuntimeError as e:
            logger.debug("Clip stop failed: %s", e)
        try:
            self._active.remove(clip)
        except ValueError:
            pass


__all__ = [
    "AudioSprite",
    "Clip",
    "SpritePlayer",
    "SpriteSegment",
    "default_clip_factory",
]
