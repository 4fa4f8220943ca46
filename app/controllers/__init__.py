"""
Controller package exports.

This file exists to make controller modules discoverable to static analysis
and to provide a stable import surface.
"""

from .app_controller import AppController, AppWidgets  # noqa: F401
from .dataset_pager import DatasetPager, PagedCollection  # noqa: F401
from .entity_manager import EntityManager, SpawnedEntity  # noqa: F401
from .hanzi_menu_controller import HanziMenuController  # noqa: F401
from .pinyin_composer import PinyinComposer  # noqa: F401
from .scene_coordinator import SceneContext, SceneCoordinator  # noqa: F401

__all__ = [
    "AppController",
    "AppWidgets",
    "DatasetPager",
    "EntityManager",
    "HanziMenuController",
    "PagedCollection",
    "PinyinComposer",
    "SceneContext",
    "SceneCoordinator",
    "SpawnedEntity",
]
