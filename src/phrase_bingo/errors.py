"""Domain errors raised by the generator, the caller and the share codec."""

from __future__ import annotations

from typing import Tuple


class BingoError(ValueError):
    """Base class for all phrase-bingo precondition failures."""


class InvalidQuantity(BingoError):
    def __init__(self, value: object, *, minimum: int = 1, maximum: int | None = None, field: str = "quantity"):
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        self.field = field
        if maximum is None:
            bound = f">= {minimum}"
        else:
            bound = f"between {minimum} and {maximum}"
        super().__init__(f"{field} must be an integer {bound}, got {value!r}")


class InsufficientPoolSize(BingoError):
    def __init__(self, *, required: int, actual: int):
        self.required = required
        self.actual = actual
        super().__init__(f"Need at least {required} unique items (you have {actual})")


class DeckSizeExceedsPool(BingoError):
    def __init__(self, *, deck_size: int, pool_size: int):
        self.deck_size = deck_size
        self.pool_size = pool_size
        super().__init__(
            f"Deck size ({deck_size}) is larger than your pool ({pool_size})"
        )


class InvalidGridSize(BingoError):
    def __init__(self, grid_size: object, supported: Tuple[int, ...]):
        self.grid_size = grid_size
        self.supported = supported
        options = ", ".join(str(s) for s in supported)
        super().__init__(f"Grid size must be one of {options}, got {grid_size!r}")


class ShareDecodeError(BingoError):
    """Share token could not be turned back into a card."""
