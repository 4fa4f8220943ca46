import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from app.services.settings_store import env_flag
from app.ui.main_window import create_main_window


def _configure_logging() -> None:
    level = logging.DEBUG if env_flag("HANZI_DEBUG") else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> int:
    _configure_logging()
    app = QApplication(sys.argv)

    window = create_main_window(settings_path=os.environ.get("HANZI_SETTINGS") or None)
    window.resize(1100, 800)
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
