"""Completion scoring of cards against the called list.

Scores are recomputed from scratch on every call; nothing here is cached.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .models import Card

_WHITESPACE = re.compile(r"\s+")


def normalize_label(label: str) -> str:
    text = _WHITESPACE.sub(" ", (label or "").strip())
    return text.replace("’", "'").replace("‘", "'").lower()


@dataclass(frozen=True)
class CardScore:
    card_id: str
    matched: int
    needed: int
    complete_at_call: Optional[int] = None

    @property
    def is_complete(self) -> bool:
        return self.needed > 0 and self.matched == self.needed


def score_card(card: Card, called: Sequence[str]) -> CardScore:
    needed = {normalize_label(label) for label in card.labels if label}
    called_keys = [normalize_label(label) for label in called]
    matched = len(needed.intersection(called_keys))

    complete_at: Optional[int] = None
    if needed and matched == len(needed):
        outstanding = set(needed)
        for index, key in enumerate(called_keys, start=1):
            outstanding.discard(key)
            if not outstanding:
                complete_at = index
                break
    return CardScore(card_id=card.id, matched=matched, needed=len(needed), complete_at_call=complete_at)


def score_pack(cards: Iterable[Card], called: Sequence[str]) -> List[CardScore]:
    return [score_card(card, called) for card in cards]


def winners(cards: Iterable[Card], called: Sequence[str]) -> List[CardScore]:
    """Complete cards, earliest completion first."""
    done = [score for score in score_pack(cards, called) if score.is_complete]
    return sorted(done, key=lambda s: (s.complete_at_call, s.card_id))
