from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Optional

from app.controllers.contracts import (
    CellData,
    Clickable,
    Coord,
    EntityListWidget,
    GridWidget,
    NumberInputWidget,
    Prompter,
    ThumbnailSource,
)
from app.controllers.dataset_pager import CHARACTER_SCENE, DATASET_SCENES, RADICAL_SCENE, DatasetPager
from app.controllers.entity_manager import EntityManager
from app.controllers.hanzi_menu_controller import CONTROL_ITEMS, HanziMenuController
from app.controllers.pinyin_composer import TONES, PinyinComposer, PlayFn
from app.controllers.scene_coordinator import DEFAULT_SCENE, SceneCoordinator
from app.domain.pinyin_database import PinyinDatabase
from app.domain.users import User, is_owner
from app.services.asset_cache import AssetCache
from app.services.level_store import LevelStore
from app.services.scene_graph import SceneGraph
from app.services.sprite_player import AudioSprite

logger = logging.getLogger(__name__)

PINYIN_SCENE: Final[str] = "pinyin_menu"
PHONETICS_SCENE: Final[str] = "phonetics_table"

MAIN_MENU_ITEMS: Final[tuple[str, ...]] = ("Pin Yin", "Phonetics", "Radicals", "Common")
MAIN_MENU_TARGETS: Final[dict[str, str]] = {
    "Pin Yin": PINYIN_SCENE,
    "Phonetics": PHONETICS_SCENE,
    "Radicals": RADICAL_SCENE,
    "Common": CHARACTER_SCENE,
}
PINYIN_HEAD_ITEMS: Final[tuple[str, ...]] = ("Initials", "Finals", "Wholes")
PINYIN_CONTROL_ITEMS: Final[tuple[str, ...]] = ("Backspace", "Clear", "Enter", "Back")

HEAD_STYLE: Final[str] = "head"


@dataclass(frozen=True)
class AppWidgets:
    """Every widget the application drives, grouped by scene."""

    home_button: Clickable
    main_menu: GridWidget
    pinyin_keyboard: GridWidget
    pinyin_heads: GridWidget
    pinyin_tones: GridWidget
    pinyin_controls: GridWidget
    pinyin_info: GridWidget
    phonetics_table: GridWidget
    hanzi_grid: GridWidget
    hanzi_info: GridWidget
    hanzi_controls: GridWidget
    number_input: NumberInputWidget
    entity_list: EntityListWidget


class AppController:
    """Builds the scenes and routes widget events to the subsystems.

    Owns:
    - SceneCoordinator (one scene active at a time)
    - DatasetPager over the shared character grid
    - PinyinComposer for the keyboard scene
    - EntityManager plus the HanziMenuController that drives it
    """

    def __init__(
        self,
        *,
        widgets: AppWidgets,
        database: PinyinDatabase,
        sprite: AudioSprite,
        play: PlayFn,
        prompter: Prompter,
        owner_name: str,
        scene_graph: SceneGraph,
        assets: AssetCache,
        levels: LevelStore,
        thumbnails: Optional[ThumbnailSource] = None,
    ) -> None:
        self.widgets = widgets
        self.database = database
        self.owner_name = owner_name

        self.scenes = SceneCoordinator()
        self.pager = DatasetPager(
            database=database,
            scenes=self.scenes,
            grid=widgets.hanzi_grid,
            info_panel=widgets.hanzi_info,
            thumbnails=thumbnails,
        )
        self.composer = PinyinComposer(
            database=database,
            sprite=sprite,
            play=play,
            keyboard=widgets.pinyin_keyboard,
            tones=widgets.pinyin_tones,
            info_panel=widgets.pinyin_info,
            columns=int(widgets.pinyin_keyboard.col),
        )
        self.entities = EntityManager(
            scene_graph=scene_graph,
            assets=assets,
            levels=levels,
            owner_name=owner_name,
            prompter=prompter,
            scale_display=widgets.number_input,
            on_selected=self.pager.show_info,
            on_deselected=self.pager.clear_info,
            grid_width=lambda: float(widgets.hanzi_grid.menu_size()[0]),
        )
        self.hanzi = HanziMenuController(
            scenes=self.scenes,
            pager=self.pager,
            entities=self.entities,
            prompter=prompter,
            owner_name=owner_name,
            grid=widgets.hanzi_grid,
        )

        self._register_scenes()
        self._populate()
        self._wire()

    # ----------------------------
    # Setup
    # ----------------------------

    def _register_scenes(self) -> None:
        w = self.widgets
        ctx = self.scenes.context
        ctx.add(DEFAULT_SCENE, [w.main_menu])
        ctx.add(PINYIN_SCENE, [w.pinyin_keyboard, w.pinyin_controls, w.pinyin_heads, w.pinyin_tones, w.pinyin_info])
        ctx.add(PHONETICS_SCENE, [w.phonetics_table])
        hanzi = [w.hanzi_grid, w.hanzi_info, w.hanzi_controls, w.number_input, w.entity_list]
        ctx.add(RADICAL_SCENE, hanzi)
        ctx.add(CHARACTER_SCENE, hanzi)

    def _populate(self) -> None:
        w = self.widgets
        w.main_menu.update_cells([[CellData(t)] for t in MAIN_MENU_ITEMS])
        w.pinyin_keyboard.update_cells([[CellData(k) for k in row] for row in self.composer.layout])
        w.pinyin_heads.update_cells([[CellData(t, HEAD_STYLE)] for t in PINYIN_HEAD_ITEMS])
        w.pinyin_tones.update_cells([[CellData(str(t)) for t in TONES]])
        w.pinyin_controls.update_cells([[CellData(t) for t in PINYIN_CONTROL_ITEMS]])
        w.hanzi_controls.update_cells([[CellData(t) for t in CONTROL_ITEMS]])
        w.phonetics_table.update_cells(self._phonetics_cells())
        self.composer.refresh()

    def _phonetics_cells(self) -> list[list[CellData]]:
        rows: list[list[CellData]] = []
        for i, row in enumerate(self.database.phonetics_table()):
            rows.append([
                CellData(text, HEAD_STYLE if i == 0 or j == 0 else None)
                for j, text in enumerate(row)
            ])
        return rows

    def _wire(self) -> None:
        w = self.widgets
        w.home_button.on_click(self.on_home)
        w.main_menu.add_behavior(self.on_main_menu)
        w.pinyin_keyboard.add_behavior(self.on_keyboard)
        w.pinyin_tones.add_behavior(self.on_tone)
        w.pinyin_controls.add_behavior(self.on_pinyin_control)
        w.phonetics_table.add_behavior(self.on_phonetics)
        w.hanzi_grid.add_behavior(self.hanzi.on_grid)
        w.hanzi_controls.add_behavior(self.hanzi.on_control)
        w.number_input.on_increase(self.hanzi.on_increase)
        w.number_input.on_decrease(self.hanzi.on_decrease)
        w.number_input.on_edit(self.hanzi.on_edit)
        w.entity_list.on_pick(self.on_entity_pick)
        self.entities.add_on_changed(self.refresh_entity_list)

    def start(self) -> None:
        self.scenes.switch_scene(DEFAULT_SCENE)

    # ----------------------------
    # Handlers
    # ----------------------------

    def on_home(self, user: User) -> None:
        if not is_owner(user, self.owner_name):
            logger.debug("Ignoring home button from non-owner %r", user.name)
            return
        self.scenes.switch_scene(DEFAULT_SCENE)

    def on_main_menu(self, coord: Coord, _name: str, _user: User) -> None:
        if not self.scenes.is_active(DEFAULT_SCENE):
            return
        row, _col = coord
        if not 0 <= row < len(MAIN_MENU_ITEMS):
            return
        self.scenes.switch_scene(MAIN_MENU_TARGETS[MAIN_MENU_ITEMS[row]])

    def on_keyboard(self, coord: Coord, _name: str, _user: User) -> None:
        if self.scenes.is_active(PINYIN_SCENE):
            self.composer.press_key(coord)

    def on_tone(self, coord: Coord, _name: str, _user: User) -> None:
        if self.scenes.is_active(PINYIN_SCENE):
            self.composer.press_tone(coord)

    def on_pinyin_control(self, coord: Coord, _name: str, _user: User) -> None:
        if not self.scenes.is_active(PINYIN_SCENE):
            return
        _row, col = coord
        if not 0 <= col < len(PINYIN_CONTROL_ITEMS):
            return
        item = PINYIN_CONTROL_ITEMS[col]
        if item == "Backspace":
            self.composer.backspace()
        elif item == "Clear":
            self.composer.clear()
        elif item == "Enter":
            self.composer.enter()
        elif item == "Back":
            self.scenes.switch_scene(DEFAULT_SCENE)

    def on_phonetics(self, coord: Coord, _name: str, _user: User) -> None:
        if self.scenes.is_active(PHONETICS_SCENE):
            self.widgets.phonetics_table.highlight(coord)

    # ----------------------------
    # Spawned entities
    # ----------------------------

    def refresh_entity_list(self) -> None:
        entities = self.entities.entities()
        labels = ["{}. {}".format(i + 1, e.character) for i, e in enumerate(entities)]
        selected = self.entities.selected
        index = next((i for i, e in enumerate(entities) if e is selected), None)
        self.widgets.entity_list.set_entries(labels, index)

    def on_entity_pick(self, index: int, user: User) -> None:
        if not self.scenes.is_active(*DATASET_SCENES):
            return
        entities = self.entities.entities()
        if not 0 <= index < len(entities):
            return
        self.entities.click(entities[index], user)
        # A refused click must not leave the list showing a different row.
        self.refresh_entity_list()
