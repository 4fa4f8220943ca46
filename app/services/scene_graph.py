"""Headless scene graph.

Keeps the actor tree that a renderer would draw: placement boxes with
colliders and the character models parented inside them. Rendering itself is
out of scope; this graph is the state a renderer (or a test) observes.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional

from app.domain.transform import Transform, Vec3
from app.domain.users import User

logger = logging.getLogger(__name__)

INVISIBLE_MATERIAL = "invisible"
HIGHLIGHT_MATERIAL = "bounding_box_highlight"

ClickHandler = Callable[[User], None]

_ids = itertools.count(1)


@dataclass(eq=False)
class Actor:
    """A node in the scene graph. Identity is the object itself."""

    name: str
    transform: Transform = field(default_factory=Transform)
    parent: Optional["Actor"] = None
    dimensions: Optional[Vec3] = None
    material: Optional[str] = None
    collider: bool = False
    grabbable: bool = False
    model_path: Optional[str] = None
    actor_id: int = field(default_factory=lambda: next(_ids))
    children: list["Actor"] = field(default_factory=list, repr=False)
    destroyed: bool = False
    _on_click: Optional[ClickHandler] = field(default=None, repr=False)

    def set_click_handler(self, handler: Optional[ClickHandler]) -> None:
        self._on_click = handler

    def click(self, user: User) -> None:
        """Deliver a click from `user` (what the input layer would do)."""
        if self.destroyed or self._on_click is None:
            return
        self._on_click(user)


class SceneGraph:
    """Owns every live actor."""

    def __init__(self) -> None:
        self._actors: list[Actor] = []

    def __iter__(self) -> Iterator[Actor]:
        return iter(list(self._actors))

    def __len__(self) -> int:
        return len(self._actors)

    def create_box(
        self,
        name: str,
        *,
        dimensions: Vec3,
        transform: Transform,
        material: str = INVISIBLE_MATERIAL,
        grabbable: bool = False,
    ) -> Actor:
        box = Actor(
            name=name,
            transform=transform,
            dimensions=dimensions,
            material=material,
            collider=True,
            grabbable=grabbable,
        )
        self._actors.append(box)
        return box

    def create_model(
        self,
        name: str,
        *,
        model_path: str,
        parent: Actor,
        local_position: Vec3,
        grabbable: bool = False,
    ) -> Actor:
        model = Actor(
            name=name,
            transform=Transform(position=local_position),
            parent=parent,
            collider=True,
            grabbable=grabbable,
            model_path=model_path,
        )
        parent.children.append(model)
        self._actors.append(model)
        return model

    def destroy(self, actor: Optional[Actor]) -> None:
        """Destroy an actor and its children; destroying twice is a no-op."""
        if actor is None or actor.destroyed:
            return
        for child in list(actor.children):
            self.destroy(child)
        actor.destroyed = True
        actor.set_click_handler(None)
        if actor.parent is not None:
            try:
                actor.parent.children.remove(actor)
            except ValueError:
                pass
        try:
            self._actors.remove(actor)
        except ValueError:
            logger.debug("Actor %s was not tracked", actor.actor_id)
