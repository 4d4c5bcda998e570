from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from .errors import InvalidGridSize

SUPPORTED_GRID_SIZES: Tuple[int, ...] = (3, 4, 5)
DEFAULT_FREE_LABEL = "FREE"


def check_grid_size(grid_size: object) -> int:
    if isinstance(grid_size, bool) or not isinstance(grid_size, int):
        raise InvalidGridSize(grid_size, SUPPORTED_GRID_SIZES)
    if grid_size not in SUPPORTED_GRID_SIZES:
        raise InvalidGridSize(grid_size, SUPPORTED_GRID_SIZES)
    return grid_size


def free_cell(grid_size: int, free_center: bool) -> Optional[Tuple[int, int]]:
    """Reserved center cell, only on odd grids with the free rule enabled."""
    if free_center and grid_size % 2 == 1:
        mid = grid_size // 2
        return (mid, mid)
    return None


def usable_cell_count(grid_size: int, free_center: bool) -> int:
    return grid_size * grid_size - (1 if free_cell(grid_size, free_center) else 0)


def place_row_major(
    labels: Sequence[str], *, grid_size: int, free_center: bool, free_label: str = DEFAULT_FREE_LABEL
) -> Tuple[Tuple[str, ...], ...]:
    """Fill a grid row by row, skipping the free cell."""
    need = usable_cell_count(grid_size, free_center)
    if len(labels) != need:
        raise ValueError(f"Expected {need} labels for a {grid_size}x{grid_size} grid, got {len(labels)}")
    reserved = free_cell(grid_size, free_center)
    rows: List[Tuple[str, ...]] = []
    k = 0
    for i in range(grid_size):
        row: List[str] = []
        for j in range(grid_size):
            if (i, j) == reserved:
                row.append(free_label)
                continue
            row.append(labels[k])
            k += 1
        rows.append(tuple(row))
    return tuple(rows)


def playable_cells(
    grid: Sequence[Sequence[str]], free_center: bool
) -> List[str]:
    """Non-free cell values in row-major order."""
    size = len(grid)
    reserved = free_cell(size, free_center)
    return [
        grid[i][j]
        for i in range(size)
        for j in range(len(grid[i]))
        if (i, j) != reserved
    ]
