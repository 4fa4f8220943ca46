from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6.QtWidgets import QAbstractItemView, QListWidget, QListWidgetItem, QWidget

from app.controllers.contracts import PickFn
from app.domain.users import User

logger = logging.getLogger(__name__)


class EntityList(QListWidget):
    """Spawned characters, one row each. Clicking a row picks that entity."""

    def __init__(self, *, user_provider: Callable[[], User], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("entityList")
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self._user_provider = user_provider
        self._picks: list[PickFn] = []
        self.itemClicked.connect(self._on_item_clicked)

    @property
    def enabled(self) -> bool:
        return self.isEnabled() and not self.isHidden()

    def enable(self) -> None:
        self.setEnabled(True)
        self.setVisible(True)

    def disable(self) -> None:
        self.setEnabled(False)
        self.setVisible(False)

    def labels(self) -> list[str]:
        return [self.item(i).text() for i in range(self.count())]

    def set_entries(self, labels: list[str], selected: Optional[int]) -> None:
        self.blockSignals(True)
        try:
            # Rows are only rebuilt when the set changed; a click handler may be running.
            if labels != self.labels():
                self.clear()
                for text in labels:
                    self.addItem(QListWidgetItem(text))
            if selected is not None and 0 <= selected < self.count():
                self.setCurrentRow(selected)
            else:
                self.clearSelection()
        finally:
            self.blockSignals(False)

    def on_pick(self, callback: PickFn) -> None:
        self._picks.append(callback)

    def pick(self, index: int) -> None:
        """Deliver a pick of row `index` as the current user."""
        user = self._user_provider()
        for cb in list(self._picks):
            try:
                cb(index, user)
            except Exception:
                logger.exception("Entity list callback failed at row %s", index)

    def _on_item_clicked(self, item: QListWidgetItem) -> None:
        self.pick(self.row(item))
