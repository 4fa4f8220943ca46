"""Grid menu widget.

A rows x cols block of push buttons with an optional title, a single-cell
highlight and a page indicator. Clicks are reported to registered behaviors as
`(coord, name, user)`; the widget itself never decides what a click means.

Besides the pixel layout, the menu carries a nominal world size (cell width,
cell height, margin) so spawned models can be placed beside it.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6.QtCore import QSize, Qt
from PyQt6.QtGui import QIcon
from PyQt6.QtWidgets import QFrame, QGridLayout, QLabel, QPushButton, QSizePolicy, QVBoxLayout, QWidget

from app.controllers.contracts import EMPTY_CELL, Behavior, CellData, Coord
from app.domain.paging import clamp_page, page_count, reshape
from app.domain.users import User

logger = logging.getLogger(__name__)

UserProvider = Callable[[], User]

_STYLE = """
QPushButton { padding: 2px; }
QPushButton[cellStyle="head"] { background-color: #5f9ea0; color: white; }
QPushButton[highlighted="true"] { border: 2px solid #d22; }
"""


def _anonymous() -> User:
    return User("")


class GridMenu(QFrame):
    def __init__(
        self,
        rows: int,
        cols: int,
        *,
        name: str = "",
        title: str = "",
        user_provider: Optional[UserProvider] = None,
        box_width: float = 0.1,
        box_height: float = 0.1,
        margin: float = 0.01,
        show_page: bool = False,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.row = int(rows)
        self.col = int(cols)
        self.coord: Optional[Coord] = None
        self.highlighted = False
        self.cur_page_num = 1

        self._name = name
        self._user_provider = user_provider or _anonymous
        self._box_width = float(box_width)
        self._box_height = float(box_height)
        self._margin = float(margin)
        self._behaviors: list[Behavior] = []
        self._icon_size = QSize(48, 48)

        self.setObjectName(name.replace(" ", "_") if name else "gridMenu")
        self.setStyleSheet(_STYLE)

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(4)

        self._title: Optional[QLabel] = None
        if title:
            self._title = QLabel(title)
            self._title.setAlignment(Qt.AlignmentFlag.AlignHCenter)
            outer.addWidget(self._title)

        grid = QGridLayout()
        grid.setSpacing(2)
        self._buttons: list[list[QPushButton]] = []
        for r in range(self.row):
            line: list[QPushButton] = []
            for c in range(self.col):
                btn = QPushButton("")
                btn.setSizePolicy(QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding)
                btn.setIconSize(self._icon_size)
                btn.setProperty("coord", "{},{}".format(r, c))
                btn.clicked.connect(lambda _checked=False, rc=(r, c): self._on_clicked(rc))
                grid.addWidget(btn, r, c)
                line.append(btn)
            self._buttons.append(line)
        outer.addLayout(grid)

        self._page_label: Optional[QLabel] = None
        if show_page:
            self._page_label = QLabel("1")
            self._page_label.setObjectName("pageIndicator")
            self._page_label.setAlignment(Qt.AlignmentFlag.AlignRight)
            outer.addWidget(self._page_label)

    # ----------------------------
    # Scene membership
    # ----------------------------

    @property
    def enabled(self) -> bool:
        return self.isEnabled() and not self.isHidden()

    def enable(self) -> None:
        self.setEnabled(True)
        self.setVisible(True)

    def disable(self) -> None:
        self.setEnabled(False)
        self.setVisible(False)

    # ----------------------------
    # Cells
    # ----------------------------

    def button(self, coord: Coord) -> QPushButton:
        r, c = coord
        return self._buttons[r][c]

    def cell_text(self, coord: Coord) -> str:
        return self.button(coord).text()

    def update_cells(self, data: list[list[CellData]]) -> None:
        for r in range(self.row):
            for c in range(self.col):
                cell = EMPTY_CELL
                if r < len(data) and c < len(data[r]):
                    cell = data[r][c]
                btn = self._buttons[r][c]
                btn.setText(cell.text)
                btn.setIcon(QIcon(cell.image) if cell.image else QIcon())
                btn.setProperty("cellStyle", cell.style or "")
                self._repolish(btn)

    def reshape(self, cells: list[CellData]) -> list[list[CellData]]:
        return reshape(cells, self.row, self.col, EMPTY_CELL)

    def menu_size(self) -> tuple[float, float]:
        w = self.col * self._box_width + (self.col - 1) * self._margin
        h = self.row * self._box_height + (self.row - 1) * self._margin
        return (w, h)

    # ----------------------------
    # Highlight
    # ----------------------------

    def highlight(self, coord: Optional[Coord], state: Optional[bool] = None) -> None:
        """Highlight `coord`; with no state, clicking the highlighted cell toggles it off."""
        if coord is None or not self._in_range(coord):
            return
        if state is None:
            state = not (self.highlighted and self.coord == coord)

        if self.highlighted and self.coord is not None:
            self._mark(self.coord, False)
        if state:
            self.coord = coord
            self.highlighted = True
            self._mark(coord, True)
        else:
            self.highlighted = False

    def get_highlighted_index(self, coord: Optional[Coord]) -> int:
        if coord is None:
            return -1
        r, c = coord
        return (self.cur_page_num - 1) * self.row * self.col + r * self.col + c

    def _mark(self, coord: Coord, on: bool) -> None:
        btn = self.button(coord)
        btn.setProperty("highlighted", "true" if on else "false")
        self._repolish(btn)

    def _in_range(self, coord: Coord) -> bool:
        r, c = coord
        return 0 <= r < self.row and 0 <= c < self.col

    # ----------------------------
    # Page indicator
    # ----------------------------

    def set_page_num(self, page: int, total: int) -> None:
        self.cur_page_num = clamp_page(int(page), int(total), self.row * self.col)
        self._show_page(total)

    def increment_page_num(self, total: int) -> None:
        self.set_page_num(self.cur_page_num + 1, total)

    def decrement_page_num(self) -> None:
        self.cur_page_num = max(1, self.cur_page_num - 1)
        self._show_page(None)

    def reset_page_num(self) -> None:
        self.cur_page_num = 1
        self._show_page(None)

    def _show_page(self, total: Optional[int]) -> None:
        if self._page_label is None:
            return
        if total is None:
            self._page_label.setText(str(self.cur_page_num))
        else:
            self._page_label.setText("{}/{}".format(self.cur_page_num, page_count(total, self.row * self.col)))

    # ----------------------------
    # Behaviors
    # ----------------------------

    def add_behavior(self, callback: Behavior) -> None:
        self._behaviors.append(callback)

    def click(self, coord: Coord) -> None:
        """Deliver a click on `coord` as the current user."""
        self._on_clicked(coord)

    def _on_clicked(self, coord: Coord) -> None:
        user = self._user_provider()
        for cb in list(self._behaviors):
            try:
                cb(coord, self._name, user)
            except Exception:
                logger.exception("Grid behavior failed on %s at %s", self._name, coord)

    @staticmethod
    def _repolish(w: QWidget) -> None:
        style = w.style()
        if style is not None:
            style.unpolish(w)
            style.polish(w)
