from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from app.controllers.contracts import Toggleable

logger = logging.getLogger(__name__)

DEFAULT_SCENE = "main_menu"

SceneListener = Callable[[str, str], None]


@dataclass
class SceneContext:
    """Scene membership plus the active-scene pointer.

    Membership is registered once at startup; `current` is "" until the first
    switch.
    """

    scenes: dict[str, tuple[Toggleable, ...]] = field(default_factory=dict)
    current: str = ""
    default: str = DEFAULT_SCENE

    def add(self, name: str, widgets: Iterable[Toggleable]) -> None:
        if name in self.scenes:
            raise ValueError("Scene already registered: {}".format(name))
        self.scenes[name] = tuple(widgets)

    def names(self) -> list[str]:
        return list(self.scenes)


class SceneCoordinator:
    """Keeps exactly one scene's widgets enabled.

    Handlers registered by other controllers must still call `is_active()`
    before acting: a disabled widget may deliver a stale event.
    """

    def __init__(self, context: SceneContext | None = None) -> None:
        self._ctx = context or SceneContext()
        self._listeners: list[SceneListener] = []

    @property
    def context(self) -> SceneContext:
        return self._ctx

    @property
    def current(self) -> str:
        return self._ctx.current

    def is_active(self, *names: str) -> bool:
        return self._ctx.current in names

    def add_listener(self, listener: SceneListener | None) -> None:
        if listener is None:
            return
        self._listeners.append(listener)

    def switch_scene(self, name: str) -> bool:
        """Activate `name`. Returns False when nothing changed."""
        ctx = self._ctx
        if ctx.current == name:
            return False

        if not ctx.current and name not in ctx.scenes:
            logger.debug("Unknown initial scene %r; using %r", name, ctx.default)
            name = ctx.default
        elif name not in ctx.scenes:
            logger.warning("Ignoring switch to unknown scene %r", name)
            return False

        previous = ctx.current
        ctx.current = name

        # Disable every other scene before enabling the target so a widget
        # shared between scenes ends up enabled.
        target = ctx.scenes.get(name, ())
        for scene_name, widgets in ctx.scenes.items():
            if scene_name == name:
                continue
            for w in widgets:
                w.disable()
        for w in target:
            w.enable()

        logger.debug("Scene %r -> %r", previous, name)
        for cb in list(self._listeners):
            try:
                cb(previous, name)
            except Exception:
                logger.exception("Scene listener failed")
        return True
