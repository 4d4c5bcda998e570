from __future__ import annotations

import math
from collections import Counter, defaultdict
from typing import Dict, List, Sequence, Tuple

from .layout import SUPPORTED_GRID_SIZES
from .models import Card, Pack
from .uniqueness import duplicate_labels


def compute_frequencies(cards: Sequence[Card], pool: Sequence[str]) -> Dict[str, int]:
    counts: Counter[str] = Counter()
    for card in cards:
        counts.update(card.labels)
    # ensure every pool label present with 0
    for label in pool:
        counts.setdefault(label, 0)
    return dict(counts)


def compute_position_frequencies(cards: Sequence[Card]) -> Dict[str, Dict[str, int]]:
    pos_counts: Dict[Tuple[int, int], Counter] = defaultdict(Counter)
    for card in cards:
        reserved = card.free_cell
        for i, row in enumerate(card.grid):
            for j, label in enumerate(row):
                if (i, j) == reserved:
                    continue
                pos_counts[(i, j)][label] += 1
    return {f"({i},{j})": dict(cn) for (i, j), cn in sorted(pos_counts.items())}


def cards_with_duplicates(cards: Sequence[Card]) -> List[str]:
    return [card.id for card in cards if duplicate_labels(card.labels)]


def count_identical_cards(cards: Sequence[Card]) -> int:
    seen: Counter = Counter(card.grid for card in cards)
    return sum(c - 1 for c in seen.values() if c > 1)


def check_free_cells(cards: Sequence[Card], free_label: str) -> bool:
    for card in cards:
        reserved = card.free_cell
        if reserved is not None and card.grid[reserved[0]][reserved[1]] != free_label:
            return False
    return True


def check_grid_shapes(cards: Sequence[Card], grid_size: int) -> bool:
    if grid_size not in SUPPORTED_GRID_SIZES:
        return False
    return all(
        len(card.grid) == grid_size and all(len(row) == grid_size for row in card.grid)
        for card in cards
    )


def chi2_wilson_hilferty_pvalue(stat: float, df: int) -> float:
    if df <= 0:
        return 1.0
    # Wilson-Hilferty approximation: transform chi-square to normal
    t = (stat / df) ** (1.0 / 3.0)
    mu = 1.0 - 2.0 / (9.0 * df)
    sigma = math.sqrt(2.0 / (9.0 * df))
    z = (t - mu) / sigma

    def phi(val: float) -> float:
        return 0.5 * (1.0 + math.erf(val / math.sqrt(2.0)))

    return max(0.0, min(1.0, 1.0 - phi(z)))


def uniformity_test(freqs: Dict[str, int], alpha: float = 0.05) -> Dict[str, object]:
    """Chi-square test that every label is used about equally often."""
    labels = len(freqs)
    placements = sum(freqs.values())
    if placements == 0 or labels < 2:
        return {"chi2": {"stat": 0.0, "df": 0, "p_value": 1.0}, "alpha": alpha, "max_minus_min": 0}
    expected = placements / labels
    stat = sum((count - expected) ** 2 / expected for count in freqs.values())
    df = labels - 1
    p = chi2_wilson_hilferty_pvalue(stat, df)
    return {
        "chi2": {"stat": round(stat, 6), "df": df, "p_value": round(p, 6)},
        "alpha": alpha,
        "max_minus_min": max(freqs.values()) - min(freqs.values()),
        "engine": "wilson_hilferty",
    }


def verify(pack: Pack) -> Dict[str, object]:
    cards = list(pack.cards)
    freqs = compute_frequencies(cards, pack.pool)
    dupes = cards_with_duplicates(cards)
    identical = count_identical_cards(cards)
    return {
        "pack_id": pack.pack_id,
        "card_count": len(cards),
        "grid_size": pack.grid_size,
        "free_center": pack.free_center,
        "frequencies": freqs,
        "position_frequencies": compute_position_frequencies(cards),
        "cards_with_duplicate_labels": dupes,
        "ok_no_duplicates_within_cards": not dupes,
        "identical_card_collisions": identical,
        "ok_no_identical_cards": identical == 0,
        "ok_free_cells": check_free_cells(cards, pack.free_label),
        "ok_grid_shapes": check_grid_shapes(cards, pack.grid_size),
        "tests": {"labels": uniformity_test(freqs)},
    }
