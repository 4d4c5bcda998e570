"""Value types shared by the generator, the scorer and the artifact writers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .layout import DEFAULT_FREE_LABEL, free_cell, playable_cells, usable_cell_count

Grid = Tuple[Tuple[str, ...], ...]


def as_grid(rows) -> Grid:
    return tuple(tuple(str(cell) for cell in row) for row in rows)


@dataclass(frozen=True)
class Card:
    """One bingo card: an id plus a square grid of labels."""

    id: str
    grid: Grid
    free_center: bool = False

    @property
    def size(self) -> int:
        return len(self.grid)

    @property
    def free_cell(self) -> Optional[Tuple[int, int]]:
        return free_cell(self.size, self.free_center)

    @property
    def labels(self) -> List[str]:
        return playable_cells(self.grid, self.free_center)

    @property
    def usable_cell_count(self) -> int:
        return usable_cell_count(self.size, self.free_center)


@dataclass(frozen=True)
class Pack:
    pack_id: str
    created_at: str
    grid_size: int
    free_center: bool
    cards: Tuple[Card, ...]
    pool: Tuple[str, ...] = ()
    title: str = "Bingo"
    sponsor_name: str = ""
    free_label: str = DEFAULT_FREE_LABEL

    def card(self, card_id: str) -> Card:
        for card in self.cards:
            if card.id == card_id:
                return card
        raise KeyError(f"Card not found in pack {self.pack_id}: {card_id}")
