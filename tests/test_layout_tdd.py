from __future__ import annotations

import pytest

from phrase_bingo.errors import InvalidGridSize
from phrase_bingo.layout import (
    check_grid_size,
    free_cell,
    place_row_major,
    playable_cells,
    usable_cell_count,
)


@pytest.mark.parametrize(
    "size,free_center,expected",
    [(3, True, 8), (3, False, 9), (4, True, 16), (4, False, 16), (5, True, 24), (5, False, 25)],
)
def test_usable_cell_count(size, free_center, expected):
    assert usable_cell_count(size, free_center) == expected


def test_free_cell_only_on_odd_grids():
    assert free_cell(5, True) == (2, 2)
    assert free_cell(3, True) == (1, 1)
    assert free_cell(4, True) is None
    assert free_cell(5, False) is None


@pytest.mark.parametrize("bad", [2, 6, 0, -5, True, "5", 5.0, None])
def test_check_grid_size_rejects_unsupported(bad):
    with pytest.raises(InvalidGridSize) as info:
        check_grid_size(bad)
    assert info.value.supported == (3, 4, 5)


def test_place_row_major_skips_free_cell():
    labels = [str(i) for i in range(8)]
    grid = place_row_major(labels, grid_size=3, free_center=True, free_label="*")
    assert grid == (("0", "1", "2"), ("3", "*", "4"), ("5", "6", "7"))
    assert playable_cells(grid, True) == labels


def test_place_row_major_requires_exact_count():
    with pytest.raises(ValueError):
        place_row_major(["a"] * 5, grid_size=3, free_center=False)
