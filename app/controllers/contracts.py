from __future__ import annotations

"""Contracts consumed by the controllers.

Controllers never import concrete widgets. They drive the grid widgets, the
number input and user prompts through these narrow, duck-typed interfaces, so
tests can substitute plain Python fakes.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from app.domain.users import User

Coord = tuple[int, int]  # (row, col)
Behavior = Callable[[Coord, str, User], None]
AnswerFn = Callable[[bool, str], None]


@dataclass(frozen=True)
class CellData:
    text: str = ""
    style: Optional[str] = None
    # Local path of a picture shown beside the text.
    image: Optional[str] = None


EMPTY_CELL = CellData()


class Toggleable(Protocol):
    def enable(self) -> None: ...

    def disable(self) -> None: ...


class GridWidget(Toggleable, Protocol):
    """Paginated, coordinate-addressable cell grid with a highlight."""

    row: int
    col: int
    coord: Optional[Coord]
    highlighted: bool
    cur_page_num: int

    def update_cells(self, data: list[list[CellData]]) -> None: ...

    def highlight(self, coord: Optional[Coord], state: Optional[bool] = None) -> None: ...

    def get_highlighted_index(self, coord: Optional[Coord]) -> int: ...

    def set_page_num(self, page: int, total: int) -> None: ...

    def increment_page_num(self, total: int) -> None: ...

    def decrement_page_num(self) -> None: ...

    def reset_page_num(self) -> None: ...

    def reshape(self, cells: list[CellData]) -> list[list[CellData]]: ...

    def add_behavior(self, callback: Behavior) -> None: ...

    def menu_size(self) -> tuple[float, float]: ...


class ValueDisplay(Toggleable, Protocol):
    """Number input showing the selected entity's scale."""

    def update_text(self, text: str) -> None: ...


class Prompter(Protocol):
    """Asynchronous request/response exchange with the acting user."""

    def prompt(self, message: str, on_answer: AnswerFn, *, with_input: bool = True) -> None: ...

    def notify(self, message: str) -> None: ...


UserCallback = Callable[[User], None]


class NumberInputWidget(ValueDisplay, Protocol):
    """Decrease / value / increase strip; clicking the value asks for a number."""

    def on_increase(self, callback: UserCallback) -> None: ...

    def on_decrease(self, callback: UserCallback) -> None: ...

    def on_edit(self, callback: UserCallback) -> None: ...


class Clickable(Protocol):
    def on_click(self, callback: UserCallback) -> None: ...


PickFn = Callable[[int, User], None]


class EntityListWidget(Toggleable, Protocol):
    """One row per spawned entity; picking a row reports its index."""

    def set_entries(self, labels: list[str], selected: Optional[int]) -> None: ...

    def on_pick(self, callback: PickFn) -> None: ...


ThumbnailReadyFn = Callable[[str, str], None]  # character, local path


class ThumbnailSource(Protocol):
    """Per-character pictures, downloaded on demand."""

    def cached(self, character: str) -> Optional[str]: ...

    def request(self, character: str, on_ready: ThumbnailReadyFn) -> None: ...
