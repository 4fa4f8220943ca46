from __future__ import annotations

"""Pure paging helpers shared by the grid widget and the dataset pager.

No Qt imports here: everything operates on plain sequences.
"""

import math
from typing import Any, Sequence, TypeVar

T = TypeVar("T")


def page_count(total: int, page_size: int) -> int:
    """Number of pages for `total` items; an empty list still has one page."""
    if page_size <= 0:
        return 1
    return max(1, math.ceil(int(total) / int(page_size)))


def clamp_page(page: int, total: int, page_size: int) -> int:
    return max(1, min(int(page), page_count(total, page_size)))


def page_slice(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """Return the 1-based page `page` of `items`, truncated at the end."""
    start = page_size * (int(page) - 1)
    if start < 0:
        return []
    return list(items[start:start + page_size])


def parse_page(text: Any) -> int | None:
    """Parse user-entered page text. Non-numeric input yields None."""
    if isinstance(text, bool):
        return None
    if isinstance(text, int):
        return text
    try:
        return int(str(text).strip())
    except (TypeError, ValueError):
        return None


def break_down(items: Sequence[T], width: int, fill: T) -> list[list[T]]:
    """Split `items` into rows of `width`, padding the last row with `fill`."""
    if width <= 0:
        return []
    rows: list[list[T]] = []
    for i in range(0, len(items), width):
        rows.append(list(items[i:i + width]))
    if not rows:
        rows.append([])
    last = rows[-1]
    last.extend([fill] * (width - len(last)))
    return rows


def reshape(items: Sequence[T], rows: int, cols: int, fill: T) -> list[list[T]]:
    """Pack a flat page into a fixed rows x cols grid, padding short pages."""
    grid = break_down(list(items[:rows * cols]), cols, fill)
    while len(grid) < rows:
        grid.append([fill] * cols)
    return grid
