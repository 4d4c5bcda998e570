from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List

from .layout import usable_cell_count


@dataclass
class Feasibility:
    feasible: bool
    reasons: List[str]


def check_pool_capacity(*, pool_size: int, grid_size: int, free_center: bool) -> Feasibility:
    need = usable_cell_count(grid_size, free_center)
    ok = pool_size >= need
    return Feasibility(
        feasible=ok,
        reasons=[] if ok else [f"pool has {pool_size} labels, a card needs {need}"],
    )


def distinct_grid_capacity(*, pool_size: int, grid_size: int, free_center: bool) -> int:
    """Number of distinct grids a pool can fill (ordered placements)."""
    need = usable_cell_count(grid_size, free_center)
    if pool_size < need:
        return 0
    return math.perm(pool_size, need)


def check_distinct_capacity(
    *, pool_size: int, grid_size: int, free_center: bool, quantity: int
) -> Feasibility:
    capacity = distinct_grid_capacity(pool_size=pool_size, grid_size=grid_size, free_center=free_center)
    ok = quantity <= capacity
    return Feasibility(
        feasible=ok,
        reasons=[] if ok else [f"quantity {quantity} exceeds distinct grid capacity {capacity}"],
    )
