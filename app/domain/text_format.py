from __future__ import annotations

"""Small text helpers for panel labels (Qt-free)."""

import textwrap

from app.domain.pinyin_database import CharacterInfo


def line_break(text: str, width: int) -> str:
    """Wrap each line of `text` at `width` columns, keeping existing breaks."""
    out: list[str] = []
    for line in (text or "").split("\n"):
        wrapped = textwrap.wrap(line, width=max(1, int(width))) or [""]
        out.extend(wrapped)
    return "\n".join(out)


def grid_cell_text(info: CharacterInfo) -> str:
    """Label for a character cell: glyph above its hex code."""
    return "{}\n{}".format(info.character, info.hex_code)


def info_panel_text(info: CharacterInfo, width: int = 40) -> str:
    return line_break("{}\n{}".format(info.character, info.describe()), width)
