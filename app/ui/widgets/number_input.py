from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6.QtWidgets import QHBoxLayout, QPushButton, QWidget

from app.controllers.contracts import UserCallback
from app.domain.users import User

logger = logging.getLogger(__name__)


class NumberInput(QWidget):
    """[-] [value] [+] strip. Clicking the value requests an edit."""

    def __init__(self, *, user_provider: Callable[[], User], parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("numberInput")
        self._user_provider = user_provider
        self._increase: list[UserCallback] = []
        self._decrease: list[UserCallback] = []
        self._edit: list[UserCallback] = []

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.minus_button = QPushButton("-")
        self.value_button = QPushButton("")
        self.value_button.setObjectName("numberInputValue")
        self.plus_button = QPushButton("+")
        for b in (self.minus_button, self.value_button, self.plus_button):
            layout.addWidget(b)

        self.minus_button.clicked.connect(lambda: self._fire(self._decrease))
        self.plus_button.clicked.connect(lambda: self._fire(self._increase))
        self.value_button.clicked.connect(lambda: self._fire(self._edit))

    @property
    def enabled(self) -> bool:
        return self.isEnabled() and not self.isHidden()

    def enable(self) -> None:
        self.setEnabled(True)
        self.setVisible(True)

    def disable(self) -> None:
        self.setEnabled(False)
        self.setVisible(False)

    def text(self) -> str:
        return self.value_button.text()

    def update_text(self, text: str) -> None:
        self.value_button.setText(text)

    def on_increase(self, callback: UserCallback) -> None:
        self._increase.append(callback)

    def on_decrease(self, callback: UserCallback) -> None:
        self._decrease.append(callback)

    def on_edit(self, callback: UserCallback) -> None:
        self._edit.append(callback)

    def _fire(self, callbacks: list[UserCallback]) -> None:
        user = self._user_provider()
        for cb in list(callbacks):
            try:
                cb(user)
            except Exception:
                logger.exception("Number input callback failed")
