"""Pack builder: turns a pool and display metadata into a finished pack."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from ..builder.cards import DEFAULT_MAX_ATTEMPTS_PER_CARD, GenerationStats, generate_cards
from ..ids import make_id
from ..layout import DEFAULT_FREE_LABEL
from ..models import Pack
from ..rng import RandomSource, create_rng, default_rng

logger = logging.getLogger(__name__)


@dataclass
class BuildParams:
    """Parameters for pack generation."""

    pool: List[str]
    quantity: int
    grid_size: int = 5
    free_center: bool = True
    title: str = "Bingo"
    sponsor_name: str = ""
    free_label: str = DEFAULT_FREE_LABEL
    id_prefix: str = "CARD"
    seed: Optional[int] = None
    rng_engine: str = "system"
    max_attempts_per_card: int = DEFAULT_MAX_ATTEMPTS_PER_CARD


@dataclass
class BuildMetrics:
    """Metrics for pack generation."""

    total_time: float
    attempts_per_card: float
    duplicate_fallbacks: int


@dataclass
class BuildResult:
    """Result of pack generation."""

    pack: Pack
    metrics: BuildMetrics


class PackBuilder:
    """Builds packs; the random source can be injected for reproducible runs."""

    def __init__(self, rng: Optional[RandomSource] = None):
        self.rng = rng

    def build(self, params: BuildParams) -> BuildResult:
        rng = self.rng or create_rng(params.rng_engine, params.seed)
        stats = GenerationStats()
        start_time = time.perf_counter()

        cards = generate_cards(
            params.pool,
            params.quantity,
            params.grid_size,
            params.free_center,
            rng=rng,
            id_prefix=params.id_prefix,
            free_label=params.free_label,
            max_attempts_per_card=params.max_attempts_per_card,
            stats=stats,
        )

        pack = Pack(
            pack_id=make_id("PACK", rng=default_rng()),
            created_at=datetime.now(timezone.utc).isoformat(),
            grid_size=params.grid_size,
            free_center=params.free_center,
            cards=tuple(cards),
            pool=tuple(params.pool),
            title=(params.title or "").strip() or "Bingo",
            sponsor_name=(params.sponsor_name or "").strip(),
            free_label=params.free_label,
        )
        metrics = BuildMetrics(
            total_time=time.perf_counter() - start_time,
            attempts_per_card=stats.attempts / len(cards),
            duplicate_fallbacks=stats.duplicate_fallbacks,
        )
        logger.info("Built pack %s with %d card(s)", pack.pack_id, len(cards))
        return BuildResult(pack=pack, metrics=metrics)
