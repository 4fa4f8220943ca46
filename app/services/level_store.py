from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from app.domain.errors import LevelFormatError, LevelNotFoundError, LevelWriteError
from app.domain.transform import Transform

logger = logging.getLogger(__name__)

LEVEL_SUFFIX = ".yaml"


@dataclass(frozen=True)
class LevelRecord:
    character: str
    transform: Transform

    def to_dict(self) -> dict[str, Any]:
        return {"character": self.character, "transform": self.transform.to_dict()}


def level_basename(name: str) -> str:
    """Reduce user input to a bare file stem ("../x/foo.yaml" -> "foo")."""
    base = os.path.basename((name or "").strip().replace("\\", "/"))
    if base.endswith(LEVEL_SUFFIX):
        base = base[: -len(LEVEL_SUFFIX)]
    return base


class LevelStore:
    """YAML level files under one directory.

    A level is a list of `{character, transform}` records. Writes go through a
    temporary file and `os.replace`, so a failed save never leaves a partial
    level behind.
    """

    def __init__(self, levels_dir: Path) -> None:
        self._dir = Path(levels_dir)

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, name: str) -> Path:
        base = level_basename(name)
        if not base or base in (".", ".."):
            raise LevelWriteError("Invalid level name: {!r}".format(name))
        return self._dir / (base + LEVEL_SUFFIX)

    def exists(self, name: str) -> bool:
        try:
            return self.path_for(name).is_file()
        except LevelWriteError:
            return False

    def names(self) -> list[str]:
        if not self._dir.is_dir():
            return []
        return sorted(p.stem for p in self._dir.glob("*" + LEVEL_SUFFIX) if p.is_file())

    def read(self, name: str) -> list[LevelRecord]:
        try:
            p = self.path_for(name)
        except LevelWriteError:
            raise LevelNotFoundError(name)
        if not p.is_file():
            raise LevelNotFoundError(name)

        try:
            with p.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, UnicodeError, yaml.YAMLError) as e:
            raise LevelFormatError("Cannot read level {}: {}".format(p, e)) from e

        if data is None:
            return []
        if not isinstance(data, list):
            raise LevelFormatError("Level {} is not a list".format(p))

        records: list[LevelRecord] = []
        for i, raw in enumerate(data):
            if not isinstance(raw, dict):
                raise LevelFormatError("Record {} in {} is not a mapping".format(i, p))
            character = raw.get("character")
            if not isinstance(character, str) or not character:
                raise LevelFormatError("Record {} in {} has no character".format(i, p))
            try:
                transform = Transform.from_dict(raw.get("transform"))
            except ValueError as e:
                raise LevelFormatError("Record {} in {}: {}".format(i, p, e)) from e
            records.append(LevelRecord(character, transform))

        logger.info("Read level %s (%d record(s))", p, len(records))
        return records

    def write(self, name: str, records: list[LevelRecord]) -> Path:
        p = self.path_for(name)
        tmp = p.with_suffix(p.suffix + ".tmp")
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            with tmp.open("w", encoding="utf-8") as f:
                yaml.safe_dump([r.to_dict() for r in records], f, allow_unicode=True, sort_keys=False)
            os.replace(str(tmp), str(p))
        except (OSError, yaml.YAMLError) as e:
            try:
                tmp.unlink()
            except OSError:
                pass
            raise LevelWriteError("Cannot write level {}: {}".format(p, e)) from e

        logger.info("Wrote level %s (%d record(s))", p, len(records))
        return p
