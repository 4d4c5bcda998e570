from __future__ import annotations

from typing import Collection, Optional

from .rng import RandomSource, default_rng

# Excludes 0/O and 1/I/L.
ID_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
ID_LENGTH = 6
MAX_ID_ATTEMPTS = 1000


def make_token(rng: Optional[RandomSource] = None, length: int = ID_LENGTH) -> str:
    rng = rng or default_rng()
    return "".join(rng.choice(ID_ALPHABET) for _ in range(length))


def make_id(
    prefix: str,
    *,
    taken: Collection[str] = (),
    rng: Optional[RandomSource] = None,
    length: int = ID_LENGTH,
) -> str:
    """Return ``<prefix>-<token>`` not present in ``taken``."""
    rng = rng or default_rng()
    for _ in range(MAX_ID_ATTEMPTS):
        token = make_token(rng, length)
        candidate = f"{prefix}-{token}" if prefix else token
        if candidate not in taken:
            return candidate
    raise RuntimeError(f"Failed to find a free id within {MAX_ID_ATTEMPTS} attempts")
