from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

from ..errors import InsufficientPoolSize, InvalidQuantity
from ..feasibility import check_distinct_capacity
from ..ids import make_id
from ..layout import DEFAULT_FREE_LABEL, check_grid_size, place_row_major, usable_cell_count
from ..models import Card, Grid
from ..rng import RandomSource, default_rng

logger = logging.getLogger(__name__)

MAX_QUANTITY = 500
DEFAULT_MAX_ATTEMPTS_PER_CARD = 200


@dataclass
class GenerationStats:
    attempts: int = 0
    duplicate_fallbacks: int = 0
    card_ids: Set[str] = field(default_factory=set)


def check_quantity(quantity: object, maximum: int = MAX_QUANTITY) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantity(quantity, minimum=1, maximum=maximum)
    if quantity < 1 or quantity > maximum:
        raise InvalidQuantity(quantity, minimum=1, maximum=maximum)
    return quantity


def _deal(
    labels: List[str],
    need: int,
    rng: RandomSource,
    grid_size: int,
    free_center: bool,
    free_label: str,
    stats: GenerationStats,
) -> Grid:
    stats.attempts += 1
    pick = rng.shuffled(labels)[:need]
    return place_row_major(pick, grid_size=grid_size, free_center=free_center, free_label=free_label)


def generate_cards(
    pool: Sequence[str],
    quantity: int,
    grid_size: int = 5,
    free_center: bool = True,
    *,
    rng: Optional[RandomSource] = None,
    id_prefix: str = "CARD",
    free_label: str = DEFAULT_FREE_LABEL,
    max_attempts_per_card: int = DEFAULT_MAX_ATTEMPTS_PER_CARD,
    stats: Optional[GenerationStats] = None,
) -> List[Card]:
    """Deal ``quantity`` cards from ``pool``.

    Each card is the head of an independent uniform shuffle of the pool,
    placed row-major around the free cell. A grid already present in the
    pack is redrawn up to ``max_attempts_per_card`` times; after that the
    last draw is kept and counted in ``stats.duplicate_fallbacks``.

    The pool is expected to be normalized already (see ``pool.text_to_pool``).
    Raises before producing anything if a precondition fails.
    """
    grid_size = check_grid_size(grid_size)
    quantity = check_quantity(quantity)
    need = usable_cell_count(grid_size, free_center)
    if len(pool) < need:
        raise InsufficientPoolSize(required=need, actual=len(pool))
    if max_attempts_per_card < 1:
        raise InvalidQuantity(max_attempts_per_card, minimum=1, field="max_attempts_per_card")

    rng = rng or default_rng()
    stats = stats if stats is not None else GenerationStats()
    labels = list(pool)

    capacity = check_distinct_capacity(
        pool_size=len(labels), grid_size=grid_size, free_center=free_center, quantity=quantity
    )
    if not capacity.feasible:
        logger.warning("Distinct cards not possible: %s", "; ".join(capacity.reasons))

    seen_grids: Set[Grid] = set()
    cards: List[Card] = []
    for index in range(quantity):
        grid = _deal(labels, need, rng, grid_size, free_center, free_label, stats)
        attempt = 1
        while grid in seen_grids:
            if attempt >= max_attempts_per_card:
                stats.duplicate_fallbacks += 1
                break
            logger.debug("Card %d: duplicate grid on attempt %d, redrawing", index + 1, attempt)
            attempt += 1
            grid = _deal(labels, need, rng, grid_size, free_center, free_label, stats)
        seen_grids.add(grid)
        card_id = make_id(id_prefix, taken=stats.card_ids, rng=rng)
        stats.card_ids.add(card_id)
        cards.append(Card(id=card_id, grid=grid, free_center=free_center))

    if stats.duplicate_fallbacks:
        logger.warning(
            "Accepted %d duplicate card(s) after %d attempts each",
            stats.duplicate_fallbacks,
            max_attempts_per_card,
        )
    logger.info("Dealt %d %dx%d card(s) from %d labels", len(cards), grid_size, grid_size, len(labels))
    return cards


generate = generate_cards
