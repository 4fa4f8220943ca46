import pytest

from app.controllers.contracts import EMPTY_CELL
from app.controllers.dataset_pager import CHARACTER_SCENE, RADICAL_SCENE, DatasetPager
from app.controllers.scene_coordinator import DEFAULT_SCENE, SceneContext, SceneCoordinator

from conftest import FakeGrid, FakeThumbnails, make_database


def build(n_characters=66, n_radicals=70, thumbnails=None):
    db = make_database(n_characters=n_characters, n_radicals=n_radicals)
    grid, info = FakeGrid(8, 8, "hanzi"), FakeGrid(1, 1, "info")
    ctx = SceneContext()
    ctx.add(DEFAULT_SCENE, [])
    ctx.add(RADICAL_SCENE, [grid, info])
    ctx.add(CHARACTER_SCENE, [grid, info])
    scenes = SceneCoordinator(ctx)
    pager = DatasetPager(database=db, scenes=scenes, grid=grid, info_panel=info, thumbnails=thumbnails)
    return db, scenes, pager, grid, info


def test_active_dataset_follows_scene():
    db, scenes, pager, *_ = build()
    scenes.switch_scene(RADICAL_SCENE)
    assert pager.active_kind() == "radicals"
    assert pager.active_dataset() == db.radicals
    scenes.switch_scene(CHARACTER_SCENE)
    assert pager.active_kind() == "characters"
    assert pager.active_dataset() == db.characters


def test_66_characters_second_page_is_padded_and_goto_clamps():
    db, scenes, pager, grid, _ = build(n_characters=66)
    scenes.switch_scene(CHARACTER_SCENE)
    assert pager.page_size == 64
    assert pager.page_count() == 2

    pager.next_page()
    assert pager.page == 2
    assert pager.current_page_slice() == db.characters[64:66]
    texts = grid.texts()
    assert len(texts) == 8 and all(len(r) == 8 for r in texts)
    assert len(grid.flat_texts()) == 2
    assert texts[0][2] == ""

    assert pager.goto_page(5)
    assert pager.page == 2
    assert grid.cur_page_num == 2


def test_prev_and_next_clamp_at_the_ends():
    _, scenes, pager, *_ = build(n_characters=66)
    scenes.switch_scene(CHARACTER_SCENE)
    pager.prev_page()
    assert pager.page == 1
    pager.next_page()
    pager.next_page()
    assert pager.page == 2


def test_non_numeric_goto_is_noop():
    _, scenes, pager, *_ = build(n_characters=200)
    scenes.switch_scene(CHARACTER_SCENE)
    pager.goto_page(3)
    assert not pager.goto_page("three")
    assert pager.page == 3


def test_page_memory_across_dataset_switches():
    _, scenes, pager, grid, _ = build(n_characters=300, n_radicals=300)
    scenes.switch_scene(CHARACTER_SCENE)
    pager.goto_page(3)

    scenes.switch_scene(RADICAL_SCENE)
    pager.goto_page(2)

    scenes.switch_scene(CHARACTER_SCENE)
    assert pager.page == 3
    assert grid.cur_page_num == 3

    scenes.switch_scene(RADICAL_SCENE)
    assert pager.page == 2


def test_page_memory_survives_a_detour_through_main_menu():
    _, scenes, pager, *_ = build(n_characters=300, n_radicals=300)
    scenes.switch_scene(CHARACTER_SCENE)
    pager.goto_page(3)
    scenes.switch_scene(DEFAULT_SCENE)
    scenes.switch_scene(RADICAL_SCENE)
    pager.goto_page(4)
    scenes.switch_scene(DEFAULT_SCENE)
    scenes.switch_scene(CHARACTER_SCENE)
    assert pager.page == 3


def test_search_filters_by_pinyin_substring_and_resets_page():
    db, scenes, pager, grid, _ = build(n_characters=200)
    scenes.switch_scene(CHARACTER_SCENE)
    pager.goto_page(2)

    n = pager.search("ren")
    assert n == 100
    assert pager.page == 1
    assert grid.cur_page_num == 1
    assert all(db.info(c).pinyin == "ren2" for c in pager.active_dataset())


def test_search_is_case_sensitive_and_can_match_nothing():
    _, scenes, pager, *_ = build()
    scenes.switch_scene(CHARACTER_SCENE)
    assert pager.search("REN") == 0
    assert pager.active_dataset() == []
    assert pager.page_count() == 1


def test_empty_search_restores_full_dataset():
    db, scenes, pager, *_ = build()
    scenes.switch_scene(CHARACTER_SCENE)
    pager.search("ma")
    assert len(pager.active_dataset()) < len(db.characters)
    assert pager.search("") == len(db.characters)
    assert pager.active_dataset() == db.characters


def test_search_only_touches_active_dataset():
    db, scenes, pager, *_ = build()
    scenes.switch_scene(RADICAL_SCENE)
    pager.search("ren")
    scenes.switch_scene(CHARACTER_SCENE)
    assert pager.active_dataset() == db.characters


@pytest.mark.parametrize(
    "coord, expected",
    [((0, 0), 64), ((0, 1), 65), ((0, 2), None), ((8, 0), None), ((0, -1), None)],
)
def test_index_for_coord_on_second_page(coord, expected):
    _, scenes, pager, *_ = build(n_characters=66)
    scenes.switch_scene(CHARACTER_SCENE)
    pager.next_page()
    assert pager.index_for_coord(coord) == expected


def test_selected_character_and_info_panel():
    db, scenes, pager, grid, info = build()
    scenes.switch_scene(CHARACTER_SCENE)
    grid.highlight((0, 1))
    c = pager.selected_character()
    assert c == db.characters[1]
    pager.show_info(c)
    assert "PinYin: ren2" in info.texts()[0][0]
    grid.highlight((0, 1))
    assert pager.selected_character() is None


def test_grid_cells_show_glyph_and_hex_code():
    db, scenes, pager, grid, _ = build()
    scenes.switch_scene(CHARACTER_SCENE)
    first = db.characters[0]
    assert grid.texts()[0][0] == "{}\n{:X}".format(first, ord(first))


def test_thumbnails_are_requested_and_redrawn_when_they_arrive():
    thumbs = FakeThumbnails()
    db, scenes, pager, grid, _ = build(n_characters=10, thumbnails=thumbs)
    first = db.characters[0]
    thumbs.paths[db.characters[1]] = "/thumbs/1.png"
    scenes.switch_scene(CHARACTER_SCENE)

    assert grid.cells[0][1].image == "/thumbs/1.png"
    assert grid.cells[0][0].image is None
    assert first in thumbs.requested
    assert db.characters[1] not in thumbs.requested

    thumbs.deliver(first, "/thumbs/0.png")
    assert grid.cells[0][0].image == "/thumbs/0.png"


def test_info_panel_picks_up_a_late_thumbnail_until_cleared():
    thumbs = FakeThumbnails()
    db, scenes, pager, _, info = build(n_characters=10, thumbnails=thumbs)
    a, b = db.characters[0], db.characters[1]
    pager.show_info(a)
    assert info.cells[0][0].image is None

    thumbs.deliver(a, "/thumbs/a.png")
    assert info.cells[0][0].image == "/thumbs/a.png"
    assert info.cells[0][0].text.startswith(a)

    pager.show_info(b)
    pager.clear_info()
    thumbs.deliver(b, "/thumbs/b.png")
    assert info.cells == [[EMPTY_CELL]]
