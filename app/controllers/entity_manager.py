from __future__ import annotations

"""Lifecycle of spawned character models.

A spawned entity is an invisible placement box (the identity, carrying the
collider, the transform and the click handler) with the character model
parented inside it. Selection is exclusive: the selected box wears the
highlight material, every other box the invisible one.

Model fetches go through the AssetCache, so `spawn` completes asynchronously
when the model is not cached yet.
"""

import bisect
import itertools
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Final, Optional

from app.controllers.contracts import Prompter, ValueDisplay
from app.domain.errors import AssetLoadError, LevelFormatError, LevelNotFoundError, LevelWriteError
from app.domain.gltf_bounds import BoundingBox
from app.domain.transform import Transform, Vec3
from app.domain.users import User, is_owner
from app.services.asset_cache import AssetCache, AssetEntry
from app.services.level_store import LevelRecord, LevelStore
from app.services.scene_graph import HIGHLIGHT_MATERIAL, INVISIBLE_MATERIAL, Actor, SceneGraph

logger = logging.getLogger(__name__)

MODEL_SCALE: Final[float] = 0.0008
SCALE_STEP: Final[float] = 0.025 / 1000
SPAWN_GAP: Final[float] = 0.05

SAVED_MESSAGE: Final[str] = "Saved"
FAILED_MESSAGE: Final[str] = "Failed"
MISSING_LEVEL_MESSAGE: Final[str] = "No such file"
OVERWRITE_MESSAGE: Final[str] = "File already exists, overwrite?"


@dataclass(eq=False)
class SpawnedEntity:
    box: Actor
    model: Actor
    character: str
    editable: bool = True
    # Request order; the live list is kept sorted by it.
    order: int = 0

    @property
    def transform(self) -> Transform:
        return self.box.transform

    @property
    def alive(self) -> bool:
        return not self.box.destroyed


def format_scale(scale: float) -> str:
    """Display units: multiples of MODEL_SCALE."""
    return "{:g}".format(round(scale / MODEL_SCALE, 6))


def parse_scale(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        v = float(value)
    else:
        try:
            v = float(str(value).strip())
        except (TypeError, ValueError):
            return None
    if not math.isfinite(v) or v <= 0:
        return None
    return v


class EntityManager:
    def __init__(
        self,
        *,
        scene_graph: SceneGraph,
        assets: AssetCache,
        levels: LevelStore,
        owner_name: str,
        prompter: Optional[Prompter] = None,
        scale_display: Optional[ValueDisplay] = None,
        on_selected: Optional[Callable[[str], None]] = None,
        on_deselected: Optional[Callable[[], None]] = None,
        grid_width: Optional[Callable[[], float]] = None,
    ) -> None:
        self._graph = scene_graph
        self._assets = assets
        self._levels = levels
        self._owner_name = owner_name
        self._prompter = prompter
        self._scale_display = scale_display
        self._on_selected = on_selected
        self._on_deselected = on_deselected
        self._grid_width = grid_width or (lambda: 0.0)
        self._on_changed: list[Callable[[], None]] = []

        self._entities: list[SpawnedEntity] = []
        self._selected: Optional[SpawnedEntity] = None
        self._tickets = itertools.count()
        # Bumped by clear_level so spawns still waiting on a model are dropped.
        self._generation = 0

    # ----------------------------
    # Queries
    # ----------------------------

    @property
    def selected(self) -> Optional[SpawnedEntity]:
        return self._selected

    def entities(self) -> list[SpawnedEntity]:
        return list(self._entities)

    def add_on_changed(self, callback: Optional[Callable[[], None]]) -> None:
        """Called after the live set or the selection changes."""
        if callback is not None:
            self._on_changed.append(callback)

    def _notify_changed(self) -> None:
        for cb in list(self._on_changed):
            try:
                cb()
            except Exception:
                logger.exception("Entity change listener failed")

    def snapshot(self) -> list[LevelRecord]:
        return [LevelRecord(e.character, e.transform.copy()) for e in self._entities]

    def default_transform(self, bounds: BoundingBox) -> Transform:
        """Beside the grid, top edge at y = 0."""
        x = float(self._grid_width()) + SPAWN_GAP + bounds.width * MODEL_SCALE / 2
        y = -bounds.height * MODEL_SCALE / 2
        return Transform(position=Vec3(x, y, 0.0), scale=Vec3.uniform(MODEL_SCALE))

    # ----------------------------
    # Spawning
    # ----------------------------

    def spawn(self, character: Optional[str], transform: Optional[Transform] = None, editable: bool = True) -> bool:
        """Request a spawn. Returns False when there is nothing to spawn."""
        if not character:
            return False
        generation = self._generation
        order = next(self._tickets)
        wanted = transform.copy() if transform is not None else None

        def _ready(entry: AssetEntry) -> None:
            if generation != self._generation:
                logger.debug("Dropping stale spawn of %r", character)
                return
            self._place(entry, wanted, editable, order)

        def _failed(error: AssetLoadError) -> None:
            logger.warning("Spawn of %r abandoned: %s", character, error.reason)

        self._assets.request(character, _ready, _failed)
        return True

    def _place(
        self, entry: AssetEntry, transform: Optional[Transform], editable: bool, order: int
    ) -> SpawnedEntity:
        bounds = entry.bounds
        box = self._graph.create_box(
            str(ord(entry.character)),
            dimensions=Vec3(bounds.width, bounds.height, bounds.depth),
            transform=transform if transform is not None else self.default_transform(bounds),
            material=INVISIBLE_MATERIAL,
            grabbable=editable,
        )
        model = self._graph.create_model(
            entry.character,
            model_path=entry.model_path,
            parent=box,
            local_position=Vec3(bounds.center_x, -bounds.center_z, 0.0),
            grabbable=editable,
        )
        entity = SpawnedEntity(box=box, model=model, character=entry.character, editable=editable, order=order)
        if editable:
            box.set_click_handler(lambda user: self.click(entity, user))
        # Models arrive in completion order; keep request order.
        bisect.insort(self._entities, entity, key=lambda e: e.order)
        logger.info("Spawned %r (box %s)", entry.character, box.actor_id)
        self._notify_changed()
        return entity

    # ----------------------------
    # Selection
    # ----------------------------

    def click(self, entity: SpawnedEntity, user: Optional[User]) -> bool:
        """Toggle exclusive selection. Returns False when the click was ignored."""
        if not is_owner(user, self._owner_name):
            logger.debug("Ignoring click from non-owner %r", getattr(user, "name", None))
            return False
        if not entity.alive:
            return False

        if self._selected is entity:
            entity.box.material = INVISIBLE_MATERIAL
            self._drop_selection()
            return True

        if self._selected is not None:
            self._selected.box.material = INVISIBLE_MATERIAL
        entity.box.material = HIGHLIGHT_MATERIAL
        self._selected = entity
        if self._on_selected is not None:
            self._on_selected(entity.character)
        self._show_scale()
        self._notify_changed()
        return True

    def _drop_selection(self) -> None:
        """Forget the selection and blank what was shown for it."""
        self._selected = None
        if self._scale_display is not None:
            self._scale_display.update_text("")
        if self._on_deselected is not None:
            self._on_deselected()
        self._notify_changed()

    def _show_scale(self) -> None:
        if self._selected is None or self._scale_display is None:
            return
        self._scale_display.update_text(format_scale(self._selected.transform.scale.x))

    # ----------------------------
    # Scale editing
    # ----------------------------

    def adjust_scale(self, delta: float) -> Optional[float]:
        """Add `delta` to every axis of the selected box. Returns the new x scale."""
        if self._selected is None:
            return None
        s = self._selected.transform.scale
        if min(s.x, s.y, s.z) + delta <= 0:
            logger.debug("Refusing to shrink %r below zero", self._selected.character)
            return s.x
        s.x += delta
        s.y += delta
        s.z += delta
        self._show_scale()
        return s.x

    def increase_scale(self) -> Optional[float]:
        return self.adjust_scale(SCALE_STEP)

    def decrease_scale(self) -> Optional[float]:
        return self.adjust_scale(-SCALE_STEP)

    def set_scale(self, value: Any) -> bool:
        """Set a uniform scale given in display units (value * MODEL_SCALE)."""
        if self._selected is None:
            return False
        v = parse_scale(value)
        if v is None:
            logger.debug("Rejected scale %r", value)
            return False
        self._selected.transform.scale = Vec3.uniform(v * MODEL_SCALE)
        self._show_scale()
        return True

    # ----------------------------
    # Deletion
    # ----------------------------

    def delete(self, entity: Optional[SpawnedEntity] = None) -> bool:
        """Delete `entity` (default: the selection). Deleting twice is a no-op."""
        target = entity if entity is not None else self._selected
        if target is None or target not in self._entities:
            return False
        self._entities.remove(target)
        self._graph.destroy(target.model)
        self._graph.destroy(target.box)
        logger.info("Deleted %r", target.character)
        if self._selected is target:
            self._drop_selection()
        else:
            self._notify_changed()
        return True

    def clear_level(self) -> int:
        self._generation += 1
        doomed = list(self._entities)
        for e in doomed:
            self.delete(e)
        return len(doomed)

    # ----------------------------
    # Levels
    # ----------------------------

    def save_level(self, name: str) -> None:
        if not self._levels.exists(name):
            self._write_level(name)
            return

        def _answer(submitted: bool, _text: str) -> None:
            if submitted:
                self._write_level(name)

        self._prompt(OVERWRITE_MESSAGE, _answer)

    def _write_level(self, name: str) -> bool:
        try:
            self._levels.write(name, self.snapshot())
        except LevelWriteError as e:
            logger.warning("Save failed: %s", e)
            self._notify(FAILED_MESSAGE)
            return False
        self._notify(SAVED_MESSAGE)
        return True

    def load_level(self, name: str, editable: bool = True) -> int:
        """Spawn every record of a level. Returns the number of records."""
        try:
            records = self._levels.read(name)
        except LevelNotFoundError:
            self._notify(MISSING_LEVEL_MESSAGE)
            return 0
        except LevelFormatError as e:
            logger.warning("Load failed: %s", e)
            self._notify(FAILED_MESSAGE)
            return 0
        for r in records:
            self.spawn(r.character, r.transform, editable)
        return len(records)

    def _notify(self, message: str) -> None:
        if self._prompter is not None:
            self._prompter.notify(message)

    def _prompt(self, message: str, on_answer: Callable[[bool, str], None]) -> None:
        if self._prompter is None:
            logger.warning("No prompter for %r; treating as declined", message)
            on_answer(False, "")
            return
        self._prompter.prompt(message, on_answer, with_input=False)
