"""Core module for bingo pack generation."""

from .builder import BuildMetrics, BuildParams, BuildResult, PackBuilder
from ..models import Card, Grid, Pack, as_grid

__all__ = [
    "BuildMetrics",
    "BuildParams",
    "BuildResult",
    "Card",
    "Grid",
    "Pack",
    "PackBuilder",
    "as_grid",
]
