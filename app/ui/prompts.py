"""Qt implementation of the Prompter contract.

Dialogs are window-modal but opened with `open()`, never `exec()`: the answer
arrives later through `on_answer(submitted, text)` while the event loop keeps
running.
"""

from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtWidgets import QDialog, QInputDialog, QMessageBox, QWidget

from app.controllers.contracts import AnswerFn

logger = logging.getLogger(__name__)


class QtPrompter:
    def __init__(self, parent: Optional[QWidget] = None) -> None:
        self._parent = parent
        # Dialogs stay referenced until they finish.
        self._open: list[QDialog] = []

    def prompt(self, message: str, on_answer: AnswerFn, *, with_input: bool = True) -> None:
        if with_input:
            dlg: QDialog = QInputDialog(self._parent)
            dlg.setWindowTitle("Hanzi Studio")
            dlg.setLabelText(message)
            dlg.setTextValue("")

            def _done(result: int) -> None:
                self._answer(on_answer, result == QDialog.DialogCode.Accepted, dlg.textValue())
                self._close(dlg)
        else:
            dlg = QMessageBox(self._parent)
            dlg.setWindowTitle("Hanzi Studio")
            dlg.setText(message)
            dlg.setStandardButtons(QMessageBox.StandardButton.Ok | QMessageBox.StandardButton.Cancel)

            def _done(_result: int) -> None:
                accepted = dlg.clickedButton() is dlg.button(QMessageBox.StandardButton.Ok)
                self._answer(on_answer, accepted, "")
                self._close(dlg)

        dlg.finished.connect(_done)
        self._open.append(dlg)
        dlg.open()

    def notify(self, message: str) -> None:
        box = QMessageBox(self._parent)
        box.setWindowTitle("Hanzi Studio")
        box.setText(message)
        box.setStandardButtons(QMessageBox.StandardButton.Ok)
        box.finished.connect(lambda _r: self._close(box))
        self._open.append(box)
        box.open()

    @staticmethod
    def _answer(on_answer: AnswerFn, submitted: bool, text: str) -> None:
        try:
            on_answer(submitted, text)
        except Exception:
            logger.exception("Prompt answer handler failed")

    def _close(self, dlg: QDialog) -> None:
        try:
            self._open.remove(dlg)
        except ValueError:
            pass
        dlg.deleteLater()
