from __future__ import annotations

import logging
from typing import Callable, Final, Optional

from app.controllers.contracts import Coord, GridWidget, Prompter
from app.controllers.dataset_pager import DATASET_SCENES, DatasetPager
from app.controllers.entity_manager import EntityManager, SpawnedEntity
from app.controllers.scene_coordinator import SceneCoordinator
from app.domain.users import User, is_owner

logger = logging.getLogger(__name__)

CONTROL_ITEMS: Final[tuple[str, ...]] = (
    "Search", "Goto", "Prev", "Next", "Spawn", "Delete", "Save", "Load", "Clear",
)
OWNER_ITEMS: Final[frozenset[str]] = frozenset({"Spawn", "Delete", "Save", "Load", "Clear"})

SEARCH_PROMPT: Final[str] = "Search Hanzi"
GOTO_PROMPT: Final[str] = "Goto page"
SAVE_PROMPT: Final[str] = "Save as:"
LOAD_PROMPT: Final[str] = "Load from:"
CLEAR_PROMPT: Final[str] = "Clear level?"
SCALE_PROMPT: Final[str] = "Change scale to"

NO_RESULTS_MESSAGE: Final[str] = "No Results"
BAD_PAGE_MESSAGE: Final[str] = "Not a page number"
BAD_SCALE_MESSAGE: Final[str] = "Not a valid scale"


class HanziMenuController:
    """Routes the radical/character menus to the pager and the entity manager.

    Every handler is gated on a dataset scene being active. Owner-only items
    are silently ignored for other users. Prompt answers arrive later, so they
    re-check the scene (and for scale edits the selection) before acting.
    """

    def __init__(
        self,
        *,
        scenes: SceneCoordinator,
        pager: DatasetPager,
        entities: EntityManager,
        prompter: Prompter,
        owner_name: str,
        grid: GridWidget,
    ) -> None:
        self._scenes = scenes
        self._pager = pager
        self._entities = entities
        self._prompter = prompter
        self._owner_name = owner_name
        self._grid = grid

        self._actions: dict[str, Callable[[User], None]] = {
            "Search": self._search,
            "Goto": self._goto,
            "Prev": lambda _u: self._pager.prev_page(),
            "Next": lambda _u: self._pager.next_page(),
            "Spawn": self._spawn,
            "Delete": lambda _u: self._entities.delete(),
            "Save": self._save,
            "Load": self._load,
            "Clear": self._clear,
        }

    def _active(self) -> bool:
        return self._scenes.is_active(*DATASET_SCENES)

    def _authorized(self, user: Optional[User], action: str) -> bool:
        if is_owner(user, self._owner_name):
            return True
        logger.debug("Ignoring %s from non-owner %r", action, getattr(user, "name", None))
        return False

    # ----------------------------
    # Grid
    # ----------------------------

    def on_grid(self, coord: Coord, _name: str, _user: User) -> None:
        if not self._active():
            return
        self._grid.highlight(coord)
        if self._grid.highlighted:
            self._pager.show_info(self._pager.character_at(coord))

    # ----------------------------
    # Control strip
    # ----------------------------

    def on_control(self, coord: Coord, _name: str, user: User) -> None:
        if not self._active():
            return
        _row, col = coord
        if not 0 <= col < len(CONTROL_ITEMS):
            return
        item = CONTROL_ITEMS[col]
        if item in OWNER_ITEMS and not self._authorized(user, item):
            return
        self._actions[item](user)

    def _search(self, _user: User) -> None:
        def _answer(submitted: bool, text: str) -> None:
            if not submitted or not self._active():
                return
            if self._pager.search((text or "").strip()) == 0:
                self._prompter.notify(NO_RESULTS_MESSAGE)

        self._prompter.prompt(SEARCH_PROMPT, _answer)

    def _goto(self, _user: User) -> None:
        def _answer(submitted: bool, text: str) -> None:
            if not submitted or not self._active():
                return
            if not self._pager.goto_page(text):
                self._prompter.notify(BAD_PAGE_MESSAGE)

        self._prompter.prompt(GOTO_PROMPT, _answer)

    def _spawn(self, _user: User) -> None:
        character = self._pager.selected_character()
        if character is None:
            logger.debug("Spawn with no highlighted character")
            return
        self._entities.spawn(character)

    def _save(self, _user: User) -> None:
        def _answer(submitted: bool, text: str) -> None:
            if submitted and (text or "").strip() and self._active():
                self._entities.save_level(text.strip())

        self._prompter.prompt(SAVE_PROMPT, _answer)

    def _load(self, _user: User) -> None:
        def _answer(submitted: bool, text: str) -> None:
            if submitted and (text or "").strip() and self._active():
                self._entities.load_level(text.strip())

        self._prompter.prompt(LOAD_PROMPT, _answer)

    def _clear(self, _user: User) -> None:
        def _answer(submitted: bool, _text: str) -> None:
            if submitted and self._active():
                self._entities.clear_level()

        self._prompter.prompt(CLEAR_PROMPT, _answer, with_input=False)

    # ----------------------------
    # Number input
    # ----------------------------

    def _editable_selection(self, user: Optional[User], action: str) -> Optional[SpawnedEntity]:
        if not self._active() or not self._authorized(user, action):
            return None
        return self._entities.selected

    def on_increase(self, user: User) -> None:
        if self._editable_selection(user, "increase") is not None:
            self._entities.increase_scale()

    def on_decrease(self, user: User) -> None:
        if self._editable_selection(user, "decrease") is not None:
            self._entities.decrease_scale()

    def on_edit(self, user: User) -> None:
        target = self._editable_selection(user, "edit")
        if target is None:
            return

        def _answer(submitted: bool, text: str) -> None:
            if not submitted or not self._active():
                return
            if self._entities.selected is not target:
                logger.debug("Selection changed while prompting; scale edit dropped")
                return
            if not self._entities.set_scale(text):
                self._prompter.notify(BAD_SCALE_MESSAGE)

        self._prompter.prompt(SCALE_PROMPT, _answer)
