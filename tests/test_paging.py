import pytest

from app.domain.paging import break_down, clamp_page, page_count, page_slice, parse_page, reshape


def test_page_count_has_at_least_one_page():
    assert page_count(0, 64) == 1
    assert page_count(64, 64) == 1
    assert page_count(65, 64) == 2
    assert page_count(66, 64) == 2


def test_clamp_page_bounds():
    assert clamp_page(5, 66, 64) == 2
    assert clamp_page(0, 66, 64) == 1
    assert clamp_page(-3, 66, 64) == 1
    assert clamp_page(1, 0, 64) == 1


def test_page_slice_truncates_last_page():
    items = list(range(66))
    assert page_slice(items, 1, 64) == list(range(64))
    assert page_slice(items, 2, 64) == [64, 65]
    assert page_slice(items, 3, 64) == []


@pytest.mark.parametrize(
    "text, expected",
    [("3", 3), (" 12 ", 12), (7, 7), ("abc", None), ("", None), (None, None), (True, None), ("2.5", None)],
)
def test_parse_page(text, expected):
    assert parse_page(text) == expected


def test_break_down_pads_last_row():
    assert break_down(["a", "b", "c"], 2, "") == [["a", "b"], ["c", ""]]


def test_reshape_pads_short_pages_to_full_grid():
    grid = reshape([1, 2], 2, 3, 0)
    assert grid == [[1, 2, 0], [0, 0, 0]]
