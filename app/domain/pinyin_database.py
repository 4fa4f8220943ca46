from __future__ import annotations

"""Pinyin and character data access (domain layer).

This module is intentionally Qt-free.

Responsibilities:
- Resolve the project data directory.
- Load the Pinyin inventory (data/pinyin.yaml) and the character datasets
  (data/characters.yaml).
- Answer prefix / exact syllable queries for the composer.

Expected YAML shapes:
- pinyin.yaml: {initials: [...], finals: [...], wholes: [...],
  syllables: [...] or [[...], [...]]}
- characters.yaml: {radicals: [...], characters: [...],
  dictionary: {char: {pinyin, stroke, english}}}
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Iterable

import yaml

logger = logging.getLogger(__name__)

_PINYIN_FILENAME: Final[str] = "pinyin.yaml"
_CHARACTERS_FILENAME: Final[str] = "characters.yaml"


def _default_data_dir() -> Path:
    """Return the project-root data directory.

    Assumes this file lives at: <root>/app/domain/pinyin_database.py
    """
    return Path(__file__).resolve().parents[2] / "data"


@dataclass(frozen=True)
class CharacterInfo:
    """Dictionary metadata for one Hanzi."""

    character: str
    pinyin: str
    stroke: int
    english: str

    @property
    def code(self) -> int:
        """Numeric code point, used as the asset lookup key."""
        return ord(self.character)

    @property
    def hex_code(self) -> str:
        return "{:X}".format(self.code)

    def describe(self) -> str:
        return "PinYin: {}\nStrokes: {}\nEnglish: {}".format(self.pinyin, self.stroke, self.english)


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists() or not path.is_file():
        logger.warning("Data file missing: %s", path)
        return {}
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        logger.warning("Malformed YAML in %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def _str_list(value: Any) -> list[str]:
    """Flatten a list (or list of lists) into non-empty stripped strings."""
    out: list[str] = []
    if not isinstance(value, list):
        return out
    for item in value:
        if isinstance(item, list):
            out.extend(_str_list(item))
            continue
        if isinstance(item, str):
            s = item.strip()
            if s:
                out.append(s)
    return out


def _parse_info(character: str, raw: Any) -> CharacterInfo | None:
    if not isinstance(raw, dict):
        return None
    pinyin = raw.get("pinyin")
    if not isinstance(pinyin, str) or not pinyin.strip():
        return None
    try:
        stroke = int(raw.get("stroke", 0))
    except (TypeError, ValueError):
        stroke = 0
    english = raw.get("english")
    return CharacterInfo(
        character=character,
        pinyin=pinyin.strip(),
        stroke=stroke,
        english=str(english).strip() if english is not None else "",
    )


@dataclass
class PinyinDatabase:
    """Read-only syllable inventory and character dictionary."""

    initials: list[str] = field(default_factory=list)
    finals: list[str] = field(default_factory=list)
    wholes: list[str] = field(default_factory=list)
    syllables: frozenset[str] = frozenset()
    radicals: list[str] = field(default_factory=list)
    characters: list[str] = field(default_factory=list)
    dictionary: dict[str, CharacterInfo] = field(default_factory=dict)
    _prefixes: frozenset[str] = field(default=frozenset(), init=False, repr=False)

    def __post_init__(self) -> None:
        self.syllables = frozenset(self.syllables)
        prefixes: set[str] = set()
        for s in self.syllables:
            for i in range(1, len(s) + 1):
                prefixes.add(s[:i])
        self._prefixes = frozenset(prefixes)

    @classmethod
    def load(cls, data_dir: Path | None = None) -> "PinyinDatabase":
        root = data_dir or _default_data_dir()
        pinyin = _read_yaml(root / _PINYIN_FILENAME)
        chars = _read_yaml(root / _CHARACTERS_FILENAME)

        dictionary: dict[str, CharacterInfo] = {}
        raw_dict = chars.get("dictionary")
        if isinstance(raw_dict, dict):
            for k, v in raw_dict.items():
                info = _parse_info(str(k), v)
                if info is not None:
                    dictionary[info.character] = info

        # Dataset entries without metadata cannot be searched or described.
        def _known(items: Iterable[str]) -> list[str]:
            return [c for c in items if c in dictionary]

        db = cls(
            initials=_str_list(pinyin.get("initials")),
            finals=_str_list(pinyin.get("finals")),
            wholes=_str_list(pinyin.get("wholes")),
            syllables=frozenset(_str_list(pinyin.get("syllables"))),
            radicals=_known(_str_list(chars.get("radicals"))),
            characters=_known(_str_list(chars.get("characters"))),
            dictionary=dictionary,
        )
        logger.debug(
            "Loaded %d syllables, %d radicals, %d characters",
            len(db.syllables), len(db.radicals), len(db.characters),
        )
        return db

    def find(self, prefix: str) -> bool:
        """Return True when some syllable starts with `prefix`."""
        return prefix in self._prefixes

    def is_syllable(self, text: str) -> bool:
        return text in self.syllables

    def info(self, character: str) -> CharacterInfo | None:
        return self.dictionary.get(character)

    def phonetics_table(self) -> list[list[str]]:
        """Initials across, finals down; a cell holds the spelled syllable or ""."""
        table = [["", *self.initials]]
        for final in self.finals:
            row = [final]
            for initial in self.initials:
                s = initial + final
                row.append(s if s in self.syllables else "")
            table.append(row)
        return table
