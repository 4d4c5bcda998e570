"""Call sequencer: draws labels from a shuffled deck in batches, without replacement.

A game is an immutable ``CallerState`` value. ``start`` builds the deck,
``draw`` returns a new state plus the batch just called, ``reset`` returns an
empty state. Nothing is kept between calls, so separate games never share
anything. Two callers advancing the *same* game concurrently must serialize
their ``draw`` calls themselves; the last saved state wins.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from .errors import DeckSizeExceedsPool, InvalidQuantity
from .pool import dedupe_labels
from .rng import RandomSource, default_rng

logger = logging.getLogger(__name__)


class CallerStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class CallerState:
    deck: Tuple[str, ...] = ()
    called: Tuple[str, ...] = ()
    round: int = 0

    @property
    def remaining(self) -> Tuple[str, ...]:
        called = set(self.called)
        return tuple(label for label in self.deck if label not in called)

    @property
    def status(self) -> CallerStatus:
        if not self.deck:
            return CallerStatus.NOT_STARTED
        if len(self.called) >= len(self.deck):
            return CallerStatus.EXHAUSTED
        return CallerStatus.RUNNING


def start(pool: Sequence[str], deck_size: int, *, rng: Optional[RandomSource] = None) -> CallerState:
    if isinstance(deck_size, bool) or not isinstance(deck_size, int) or deck_size < 1:
        raise InvalidQuantity(deck_size, minimum=1, field="deck_size")
    labels = dedupe_labels(pool)
    if deck_size > len(labels):
        raise DeckSizeExceedsPool(deck_size=deck_size, pool_size=len(labels))
    rng = rng or default_rng()
    deck = tuple(rng.shuffled(labels)[:deck_size])
    logger.info("Started game with a deck of %d from %d labels", len(deck), len(labels))
    return CallerState(deck=deck)


def draw(state: CallerState, batch_size: int) -> Tuple[CallerState, Tuple[str, ...]]:
    """Call the next ``batch_size`` labels in deck order.

    An exhausted (or never started) game comes back unchanged with an empty
    batch. Every non-empty draw advances ``round`` by one.
    """
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
        raise InvalidQuantity(batch_size, minimum=1, field="batch_size")
    remaining = state.remaining
    if not remaining:
        return state, ()
    batch = remaining[:batch_size]
    new_state = replace(state, called=state.called + batch, round=state.round + 1)
    logger.debug("Round %d called %d label(s), %d left", new_state.round, len(batch), len(remaining) - len(batch))
    return new_state, batch


def reset() -> CallerState:
    return CallerState()
