from __future__ import annotations

import logging
from enum import Enum, auto
from typing import Callable, Final, Optional

from app.controllers.contracts import CellData, Coord, GridWidget
from app.domain.paging import break_down
from app.domain.pinyin_database import PinyinDatabase
from app.services.sprite_player import AudioSprite, SpriteSegment

logger = logging.getLogger(__name__)

PLACEHOLDER: Final[str] = "Awaiting Input"
ERROR_MESSAGE: Final[str] = "No Such Syllable"
MISSING_AUDIO_MESSAGE: Final[str] = "No Recording"

KEYBOARD_COLUMNS: Final[int] = 12
TONES: Final[tuple[int, ...]] = (1, 2, 3, 4)

PlayFn = Callable[[SpriteSegment], None]


class ComposerState(Enum):
    EMPTY = auto()
    COMPOSING = auto()


def audio_key(syllable: str, tone: Optional[int]) -> str:
    """Sprite key for a syllable: "ü" is romanised as "v", tone digit appended."""
    key = syllable.replace("ü", "v")
    return key + str(tone) if tone else key


def keyboard_layout(database: PinyinDatabase, columns: int = KEYBOARD_COLUMNS) -> list[list[str]]:
    """Initials, finals and whole syllables, each group starting on a new row."""
    rows: list[list[str]] = []
    for group in (database.initials, database.finals, database.wholes):
        if group:
            rows.extend(break_down(group, columns, ""))
    return rows


class PinyinComposer:
    """Validated Pinyin entry with tone selection and sprite playback.

    Invariant: the buffer is always a prefix of at least one syllable. A key
    that breaks this empties the buffer and raises the error state, which is
    shown until the next input.
    """

    def __init__(
        self,
        *,
        database: PinyinDatabase,
        sprite: AudioSprite,
        play: PlayFn,
        keyboard: Optional[GridWidget] = None,
        tones: Optional[GridWidget] = None,
        info_panel: Optional[GridWidget] = None,
        columns: int = KEYBOARD_COLUMNS,
    ) -> None:
        self._db = database
        self._sprite = sprite
        self._play = play
        self._keyboard = keyboard
        self._tones = tones
        self._info_panel = info_panel
        self._layout = keyboard_layout(database, columns)

        self._buffer = ""
        self._tone: Optional[int] = None
        self._error: Optional[str] = None

    # ----------------------------
    # State
    # ----------------------------

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def tone(self) -> Optional[int]:
        return self._tone

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def state(self) -> ComposerState:
        return ComposerState.COMPOSING if self._buffer else ComposerState.EMPTY

    @property
    def layout(self) -> list[list[str]]:
        return [list(r) for r in self._layout]

    def display_text(self) -> str:
        if self._buffer:
            return self._buffer
        if self._error:
            return self._error
        return PLACEHOLDER

    # ----------------------------
    # Editing
    # ----------------------------

    def append(self, text: str) -> bool:
        """Append a keyboard component. Returns False when it was rejected."""
        self._error = None
        candidate = self._buffer + (text or "")
        if not self._db.find(candidate):
            logger.debug("Rejected pinyin prefix %r", candidate)
            self._buffer = ""
            self._error = ERROR_MESSAGE
            self._release_key()
            self.refresh()
            return False
        self._buffer = candidate
        self.refresh()
        return True

    def backspace(self) -> None:
        self._error = None
        self._buffer = self._buffer[:-1]
        self.refresh()

    def clear(self) -> None:
        self._error = None
        self._buffer = ""
        self._release_key()
        self.refresh()

    def enter(self) -> Optional[str]:
        """Commit the buffer. Returns the played sprite key, or None on error."""
        self._error = None
        text = self._buffer
        played: Optional[str] = None

        if text and self._db.is_syllable(text):
            key = audio_key(text, self._tone)
            segment = self._sprite.get(key)
            if segment is None:
                logger.info("No recording for %r", key)
                self._error = MISSING_AUDIO_MESSAGE
            else:
                logger.debug("Playing %r at %dms for %dms", key, segment.start_ms, segment.duration_ms)
                self._play(segment)
                played = key
        else:
            self._error = ERROR_MESSAGE

        self._buffer = ""
        self._release_key()
        self.refresh()
        return played

    def select_tone(self, tone: Optional[int]) -> Optional[int]:
        """Toggle a tone; selecting the current tone clears it."""
        if tone is not None and tone not in TONES:
            return self._tone
        previous = self._tone
        self._tone = None if tone is None or tone == previous else tone

        if self._tones is not None:
            if previous is not None:
                self._tones.highlight((0, previous - 1), False)
            if self._tone is not None:
                self._tones.highlight((0, self._tone - 1), True)
        return self._tone

    # ----------------------------
    # Widget events
    # ----------------------------

    def key_at(self, coord: Optional[Coord]) -> str:
        if coord is None:
            return ""
        row, col = coord
        if 0 <= row < len(self._layout) and 0 <= col < len(self._layout[row]):
            return self._layout[row][col]
        return ""

    def press_key(self, coord: Coord) -> bool:
        key = self.key_at(coord)
        if not key:
            return False
        if self._keyboard is not None:
            self._keyboard.highlight(coord, True)
        return self.append(key)

    def press_tone(self, coord: Coord) -> Optional[int]:
        _row, col = coord
        return self.select_tone(col + 1)

    def _release_key(self) -> None:
        if self._keyboard is not None and self._keyboard.highlighted:
            self._keyboard.highlight(self._keyboard.coord, False)

    def refresh(self) -> None:
        """Push the display text to the info panel."""
        if self._info_panel is not None:
            self._info_panel.update_cells([[CellData(self.display_text())]])
