from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from app.controllers.contracts import EMPTY_CELL, CellData, Coord, GridWidget, ThumbnailSource
from app.controllers.scene_coordinator import SceneCoordinator
from app.domain.paging import clamp_page, page_count, page_slice, parse_page
from app.domain.pinyin_database import CharacterInfo, PinyinDatabase
from app.domain.text_format import grid_cell_text, info_panel_text

logger = logging.getLogger(__name__)

RADICAL_SCENE = "radical_menu"
CHARACTER_SCENE = "common_hanzi_menu"
DATASET_SCENES = (RADICAL_SCENE, CHARACTER_SCENE)


@dataclass
class PagedCollection:
    """One searchable dataset shown through the shared grid.

    Owns:
    - the immutable source list
    - the working list (replaced wholesale by `search`)
    - the page the user left this dataset on
    """

    name: str
    source: tuple[str, ...]
    database: PinyinDatabase
    working: list[str] = field(default_factory=list)
    remembered_page: Optional[int] = None

    def __post_init__(self) -> None:
        self.source = tuple(self.source)
        if not self.working:
            self.working = list(self.source)

    def search(self, query: str) -> int:
        """Filter by case-sensitive pinyin substring; "" restores the source."""
        if not query:
            self.working = list(self.source)
            return len(self.working)

        def _matches(c: str) -> bool:
            info = self.database.info(c)
            return info is not None and query in info.pinyin

        self.working = [c for c in self.source if _matches(c)]
        return len(self.working)


class DatasetPager:
    """Time-shares one grid between the radical and character datasets.

    Which dataset is active is a pure function of the current scene. The live
    page cursor is mirrored into the grid's page indicator; each dataset
    remembers where it was left so switching back restores it.
    """

    def __init__(
        self,
        *,
        database: PinyinDatabase,
        scenes: SceneCoordinator,
        grid: GridWidget,
        info_panel: Optional[GridWidget] = None,
        page_size: Optional[int] = None,
        thumbnails: Optional[ThumbnailSource] = None,
    ) -> None:
        self._db = database
        self._scenes = scenes
        self._grid = grid
        self._info_panel = info_panel
        self._thumbnails = thumbnails
        self._info_character: Optional[str] = None
        self._page_size = int(page_size) if page_size else int(grid.row) * int(grid.col)
        self._page = 1
        self._collections: dict[str, PagedCollection] = {
            RADICAL_SCENE: PagedCollection("radicals", tuple(database.radicals), database),
            CHARACTER_SCENE: PagedCollection("characters", tuple(database.characters), database),
        }
        self._shown: Optional[PagedCollection] = None

        scenes.add_listener(self.on_scene_switched)

    # ----------------------------
    # Queries
    # ----------------------------

    @property
    def page(self) -> int:
        return self._page

    @property
    def page_size(self) -> int:
        return self._page_size

    def collection(self, scene: str) -> PagedCollection:
        return self._collections[scene]

    def active_collection(self) -> PagedCollection:
        if self._scenes.is_active(RADICAL_SCENE):
            return self._collections[RADICAL_SCENE]
        return self._collections[CHARACTER_SCENE]

    def active_kind(self) -> str:
        return self.active_collection().name

    def active_dataset(self) -> list[str]:
        return list(self.active_collection().working)

    def page_count(self) -> int:
        return page_count(len(self.active_collection().working), self._page_size)

    def current_page_slice(self) -> list[str]:
        return page_slice(self.active_collection().working, self._page, self._page_size)

    def index_for_coord(self, coord: Optional[Coord]) -> Optional[int]:
        """Row-major index of a grid cell into the active working list."""
        if coord is None:
            return None
        row, col = coord
        if not (0 <= row < self._grid.row and 0 <= col < self._grid.col):
            return None
        index = (self._page - 1) * self._page_size + row * int(self._grid.col) + col
        if 0 <= index < len(self.active_collection().working):
            return index
        return None

    def character_at(self, coord: Optional[Coord]) -> Optional[str]:
        index = self.index_for_coord(coord)
        if index is None:
            return None
        return self.active_collection().working[index]

    def selected_character(self) -> Optional[str]:
        """Character under the grid highlight, if any."""
        if not self._grid.highlighted:
            return None
        return self.character_at(self._grid.coord)

    # ----------------------------
    # Navigation
    # ----------------------------

    def goto_page(self, page: Any) -> bool:
        """Jump to a page (clamped). Non-numeric input leaves the page as is."""
        p = parse_page(page)
        if p is None:
            logger.debug("Ignoring non-numeric page %r", page)
            return False
        self._set_page(p)
        return True

    def next_page(self) -> None:
        self._set_page(self._page + 1)

    def prev_page(self) -> None:
        self._set_page(self._page - 1)

    def search(self, query: str) -> int:
        """Filter the active dataset and return the number of matches."""
        coll = self.active_collection()
        n = coll.search(query or "")
        self._page = 1
        self._grid.reset_page_num()
        logger.debug("Search %r in %s: %d result(s)", query, coll.name, n)
        self.render()
        return n

    def _set_page(self, page: int) -> None:
        total = len(self.active_collection().working)
        self._page = clamp_page(page, total, self._page_size)
        self._grid.set_page_num(self._page, total)
        self.render()

    # ----------------------------
    # Scene switching
    # ----------------------------

    def on_scene_switched(self, previous: str, current: str) -> None:
        if current not in DATASET_SCENES:
            return
        incoming = self._collections[current]
        outgoing = self._shown
        if outgoing is not None and outgoing is not incoming:
            outgoing.remembered_page = self._page
            if incoming.remembered_page is not None:
                self._page = clamp_page(incoming.remembered_page, len(incoming.working), self._page_size)
                self._grid.set_page_num(self._page, len(incoming.working))
        self._shown = incoming
        self.render()

    # ----------------------------
    # Rendering
    # ----------------------------

    def render(self) -> None:
        cells: list[CellData] = []
        for c in self.current_page_slice():
            info = self._db.info(c)
            text = grid_cell_text(info) if info is not None else c
            cells.append(CellData(text, image=self._thumbnail(c)))
        self._grid.update_cells(self._grid.reshape(cells))

    def show_info(self, character: Optional[str]) -> None:
        if character is None or self._info_panel is None:
            return
        info: Optional[CharacterInfo] = self._db.info(character)
        if info is None:
            return
        self._info_character = character
        self._info_panel.update_cells([[CellData(info_panel_text(info), image=self._thumbnail(character))]])

    def clear_info(self) -> None:
        self._info_character = None
        if self._info_panel is not None:
            self._info_panel.update_cells([[EMPTY_CELL]])

    # ----------------------------
    # Thumbnails
    # ----------------------------

    def _thumbnail(self, character: str) -> Optional[str]:
        """Cached picture path; a missing one is requested and redrawn on arrival."""
        if self._thumbnails is None:
            return None
        path = self._thumbnails.cached(character)
        if path is None:
            self._thumbnails.request(character, self._on_thumbnail)
        return path

    def _on_thumbnail(self, character: str, _path: str) -> None:
        if character in self.current_page_slice():
            self.render()
        if character == self._info_character:
            self.show_info(character)
