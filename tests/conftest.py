# tests/conftest.py
import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
os.environ.setdefault("HANZI_TEST_MODE", "1")

from pathlib import Path
from typing import Optional

import pytest

from app.controllers.contracts import EMPTY_CELL, CellData
from app.domain.gltf_bounds import BoundingBox
from app.domain.paging import clamp_page, reshape
from app.domain.pinyin_database import CharacterInfo, PinyinDatabase
from app.domain.users import User
from app.services.asset_cache import AssetEntry

OWNER = User("owner")
GUEST = User("guest")

DATA_DIR = Path(__file__).resolve().parents[1] / "data"


class FakeGrid:
    """In-memory GridWidget."""

    def __init__(self, rows: int, cols: int, name: str = "grid") -> None:
        self.row = rows
        self.col = cols
        self.name = name
        self.coord = None
        self.highlighted = False
        self.cur_page_num = 1
        self.cells: list[list[CellData]] = []
        self.enabled = False
        self.behaviors = []

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def update_cells(self, data) -> None:
        self.cells = [list(r) for r in data]

    def texts(self) -> list[list[str]]:
        return [[c.text for c in r] for r in self.cells]

    def flat_texts(self) -> list[str]:
        return [c.text for r in self.cells for c in r if c.text]

    def highlight(self, coord, state=None) -> None:
        if coord is None:
            return
        if state is None:
            state = not (self.highlighted and self.coord == coord)
        if state:
            self.coord = coord
            self.highlighted = True
        else:
            self.highlighted = False

    def get_highlighted_index(self, coord) -> int:
        r, c = coord
        return (self.cur_page_num - 1) * self.row * self.col + r * self.col + c

    def set_page_num(self, page: int, total: int) -> None:
        self.cur_page_num = clamp_page(page, total, self.row * self.col)

    def increment_page_num(self, total: int) -> None:
        self.set_page_num(self.cur_page_num + 1, total)

    def decrement_page_num(self) -> None:
        self.cur_page_num = max(1, self.cur_page_num - 1)

    def reset_page_num(self) -> None:
        self.cur_page_num = 1

    def reshape(self, cells):
        return reshape(cells, self.row, self.col, EMPTY_CELL)

    def add_behavior(self, callback) -> None:
        self.behaviors.append(callback)

    def click(self, coord, user: User = OWNER) -> None:
        for cb in list(self.behaviors):
            cb(coord, self.name, user)

    def menu_size(self):
        return (self.col * 0.2, self.row * 0.2)


class FakeNumberInput:
    def __init__(self) -> None:
        self.text = ""
        self.enabled = False
        self.increase, self.decrease, self.edit = [], [], []

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def update_text(self, text: str) -> None:
        self.text = text

    def on_increase(self, cb) -> None:
        self.increase.append(cb)

    def on_decrease(self, cb) -> None:
        self.decrease.append(cb)

    def on_edit(self, cb) -> None:
        self.edit.append(cb)


class FakeEntityList:
    def __init__(self) -> None:
        self.labels: list[str] = []
        self.selected = None
        self.enabled = False
        self.picks = []

    def enable(self) -> None:
        self.enabled = True

    def disable(self) -> None:
        self.enabled = False

    def set_entries(self, labels, selected) -> None:
        self.labels = list(labels)
        self.selected = selected

    def on_pick(self, cb) -> None:
        self.picks.append(cb)

    def pick(self, index: int, user: User = OWNER) -> None:
        for cb in list(self.picks):
            cb(index, user)


class FakeThumbnails:
    """ThumbnailSource whose downloads finish when a test delivers them."""

    def __init__(self) -> None:
        self.paths: dict[str, str] = {}
        self.requested: list[str] = []
        self.waiting: dict[str, list] = {}

    def cached(self, character):
        return self.paths.get(character)

    def request(self, character, on_ready) -> None:
        self.requested.append(character)
        self.waiting.setdefault(character, []).append(on_ready)

    def deliver(self, character: str, path: str) -> None:
        self.paths[character] = path
        for cb in self.waiting.pop(character, []):
            cb(character, path)


class FakeButton:
    def __init__(self) -> None:
        self.callbacks = []

    def on_click(self, cb) -> None:
        self.callbacks.append(cb)

    def click(self, user: User = OWNER) -> None:
        for cb in list(self.callbacks):
            cb(user)


class FakePrompter:
    """Records prompts; tests answer them explicitly, oldest first."""

    def __init__(self) -> None:
        self.pending = []
        self.messages: list[str] = []
        self.notices: list[str] = []

    def prompt(self, message, on_answer, *, with_input=True) -> None:
        self.messages.append(message)
        self.pending.append((message, on_answer, with_input))

    def notify(self, message) -> None:
        self.notices.append(message)

    def answer(self, submitted: bool = True, text: str = "") -> str:
        message, on_answer, _ = self.pending.pop(0)
        on_answer(submitted, text)
        return message


BOUNDS = BoundingBox(width=100.0, height=200.0, depth=10.0, center_x=5.0, center_y=100.0, center_z=2.0)


class FakeLoader:
    """AssetLoader that completes immediately or on demand."""

    def __init__(self, auto: bool = True, bounds: BoundingBox = BOUNDS) -> None:
        self.auto = auto
        self.bounds = bounds
        self.calls: list[str] = []
        self.waiting = {}

    def load(self, character, on_loaded, on_failed) -> None:
        self.calls.append(character)
        if self.auto:
            on_loaded(self.entry(character))
        else:
            self.waiting[character] = (on_loaded, on_failed)

    def entry(self, character: str) -> AssetEntry:
        return AssetEntry(character, self.bounds, "/models/{}.glb".format(ord(character)))

    def finish(self, character: str) -> None:
        on_loaded, _ = self.waiting.pop(character)
        on_loaded(self.entry(character))

    def fail(self, character: str, reason: str = "boom") -> None:
        _, on_failed = self.waiting.pop(character)
        on_failed(character, reason)


def make_database(
    n_characters: int = 10,
    n_radicals: int = 5,
    syllables: Optional[set] = None,
) -> PinyinDatabase:
    """Synthetic database; character i has pinyin "ma1" when even, "ren2" when odd."""
    chars = [chr(0x4E00 + i) for i in range(n_characters)]
    rads = [chr(0x2F00 + i) for i in range(n_radicals)]
    dictionary = {}
    for i, c in enumerate(chars + rads):
        dictionary[c] = CharacterInfo(c, "ma1" if i % 2 == 0 else "ren2", i + 1, "word {}".format(i))
    return PinyinDatabase(
        initials=["b", "m", "n", "h", "r", "zh"],
        finals=["a", "e", "i", "ao", "en", "ong", "ü"],
        wholes=["zhi", "ri"],
        syllables=frozenset(syllables or {"a", "ba", "ma", "mao", "ni", "hao", "ren", "zha", "zhong", "zhi", "ri", "nü"}),
        radicals=rads,
        characters=chars,
        dictionary=dictionary,
    )


@pytest.fixture
def database() -> PinyinDatabase:
    return make_database()


@pytest.fixture(scope="session")
def real_database() -> PinyinDatabase:
    return PinyinDatabase.load(DATA_DIR)


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


@pytest.fixture
def loader() -> FakeLoader:
    return FakeLoader()
