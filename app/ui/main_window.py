"""Main window factory.

This module owns construction and UI wiring for the application's main window.

Public API:
- create_main_window(...): builds and returns the main window without starting the
  Qt event loop, enabling UI tests to instantiate the window headlessly.

Design notes:
- QApplication creation and app.exec() stay in `main.py`.
- All scene widgets live in one column; the SceneCoordinator shows exactly one
  scene's widgets at a time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from PyQt6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from app.controllers.app_controller import AppController, AppWidgets
from app.controllers.contracts import ThumbnailSource, UserCallback
from app.controllers.pinyin_composer import KEYBOARD_COLUMNS, TONES, keyboard_layout
from app.domain.pinyin_database import PinyinDatabase
from app.domain.users import User
from app.services.asset_cache import AssetCache, AssetLoader
from app.services.asset_loader import RemoteAssetLoader
from app.services.level_store import LevelStore
from app.services.scene_graph import SceneGraph
from app.services.settings_store import HanziConfig, SettingsStore
from app.services.sprite_player import AudioSprite, ClipFactory, SpritePlayer
from app.services.thumbnail_loader import ThumbnailLoader
from app.ui.prompts import QtPrompter
from app.ui.widgets.entity_list import EntityList
from app.ui.widgets.grid_menu import GridMenu
from app.ui.widgets.number_input import NumberInput

logger = logging.getLogger(__name__)

HANZI_GRID_ROWS = 8
HANZI_GRID_COLS = 8


@dataclass(frozen=True)
class MainWindowHandles:
    """Handles that tests may need; attached as `window._handles`."""

    controller: AppController
    widgets: AppWidgets
    config: HanziConfig
    prompter: QtPrompter
    player: SpritePlayer
    scene_graph: SceneGraph


class HomeButton(QPushButton):
    """Always-visible button that returns to the main menu."""

    def __init__(self, *, user_provider: Callable[[], User], parent: Optional[QWidget] = None) -> None:
        super().__init__("Home", parent)
        self.setObjectName("homeButton")
        self._user_provider = user_provider
        self._callbacks: list[UserCallback] = []
        self.clicked.connect(self._fire)

    def on_click(self, callback: UserCallback) -> None:
        self._callbacks.append(callback)

    def _fire(self) -> None:
        user = self._user_provider()
        for cb in list(self._callbacks):
            cb(user)


def _build_widgets(db: PinyinDatabase, user_provider: Callable[[], User]) -> AppWidgets:
    def grid(rows: int, cols: int, name: str, title: str = "", **kw) -> GridMenu:
        return GridMenu(max(1, rows), max(1, cols), name=name, title=title, user_provider=user_provider, **kw)

    phonetics = db.phonetics_table()
    return AppWidgets(
        home_button=HomeButton(user_provider=user_provider),
        main_menu=grid(4, 1, "main menu", "Main Menu"),
        pinyin_keyboard=grid(len(keyboard_layout(db, KEYBOARD_COLUMNS)), KEYBOARD_COLUMNS, "pinyin menu", "Pinyin"),
        pinyin_heads=grid(3, 1, "pinyin head"),
        pinyin_tones=grid(1, len(TONES), "pinyin tone"),
        pinyin_controls=grid(1, 4, "pinyin menu control"),
        pinyin_info=grid(1, 1, "pinyin info"),
        phonetics_table=grid(len(phonetics), len(phonetics[0]), "phonetics table", "The Pinyin Phonetics Table"),
        hanzi_grid=grid(
            HANZI_GRID_ROWS, HANZI_GRID_COLS, "common hanzi menu", "Common Hanzi Characters",
            box_width=0.2, box_height=0.2, margin=0.01, show_page=True,
        ),
        hanzi_info=grid(1, 1, "hanzi info"),
        hanzi_controls=grid(1, 9, "common hanzi menu control"),
        number_input=NumberInput(user_provider=user_provider),
        entity_list=EntityList(user_provider=user_provider),
    )


def _lay_out(window: QWidget, w: AppWidgets) -> None:
    root = QVBoxLayout(window)

    top = QHBoxLayout()
    top.addWidget(w.home_button)  # type: ignore[arg-type]
    title = QLabel("Hanzi Studio")
    title.setObjectName("titleLabel")
    top.addWidget(title, 1)
    root.addLayout(top)

    root.addWidget(w.main_menu)  # type: ignore[arg-type]

    keys = QHBoxLayout()
    keys.addWidget(w.pinyin_heads)  # type: ignore[arg-type]
    keys.addWidget(w.pinyin_keyboard, 1)  # type: ignore[arg-type]
    root.addLayout(keys)
    for x in (w.pinyin_tones, w.pinyin_controls, w.pinyin_info, w.phonetics_table):
        root.addWidget(x)  # type: ignore[arg-type]

    hanzi = QHBoxLayout()
    hanzi.addWidget(w.hanzi_grid, 1)  # type: ignore[arg-type]
    side = QVBoxLayout()
    for x in (w.hanzi_info, w.hanzi_controls, w.number_input):
        side.addWidget(x)  # type: ignore[arg-type]
    side.addWidget(w.entity_list, 1)  # type: ignore[arg-type]
    hanzi.addLayout(side)
    root.addLayout(hanzi)


def create_main_window(
    *,
    expose_handles: bool = True,
    settings_path: str | None = None,
    loader: Optional[AssetLoader] = None,
    clip_factory: Optional[ClipFactory] = None,
    data_dir: Optional[Path] = None,
    thumbnails: Optional[ThumbnailSource] = None,
):
    """Create and return the application's main window.

    This function must NOT call app.exec(). It assumes a QApplication exists.

    Args:
        expose_handles: If True, attaches `window._handles` for tests.
        settings_path: Optional path to a settings.yaml.
        loader: Model loader; defaults to downloading from the configured URL.
        clip_factory: Audio clip factory; defaults to QtMultimedia.
        data_dir: Directory holding pinyin.yaml / characters.yaml.
        thumbnails: Thumbnail source; defaults to downloading from the configured URL.
    """
    config = SettingsStore(settings_path).config()
    db = PinyinDatabase.load(data_dir)
    sprite = AudioSprite.load(config.sprite_path)

    window = QWidget()
    window.setObjectName("MainWindow")
    window.setWindowTitle("Hanzi Studio")

    def current_user() -> User:
        return User(config.user_name)

    widgets = _build_widgets(db, current_user)
    _lay_out(window, widgets)

    player = SpritePlayer(config.sound_path, clip_factory=clip_factory, parent=window)
    prompter = QtPrompter(window)
    if loader is None:
        loader = RemoteAssetLoader(
            base_url=config.models_base_url,
            cache_dir=config.cache_dir,
            timeout=config.fetch_timeout_s,
            parent=window,
        )
    if thumbnails is None:
        thumbnails = ThumbnailLoader(
            base_url=config.thumbnails_base_url,
            cache_dir=config.cache_dir,
            timeout=config.fetch_timeout_s,
            parent=window,
        )
    scene_graph = SceneGraph()

    controller = AppController(
        widgets=widgets,
        database=db,
        sprite=sprite,
        play=player.play,
        prompter=prompter,
        owner_name=config.owner_name,
        scene_graph=scene_graph,
        assets=AssetCache(loader),
        levels=LevelStore(config.levels_dir),
        thumbnails=thumbnails,
    )
    controller.start()
    logger.info("Main window ready (user %r, owner %r)", config.user_name, config.owner_name)

    if expose_handles:
        setattr(
            window,
            "_handles",
            MainWindowHandles(
                controller=controller,
                widgets=widgets,
                config=config,
                prompter=prompter,
                player=player,
                scene_graph=scene_graph,
            ),
        )
    return window
