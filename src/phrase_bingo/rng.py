from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, MutableSequence, Optional, Sequence, TypeVar


try:  # optional dependency
    import numpy as _np  # type: ignore
except Exception:  # pragma: no cover - optional
    _np = None


T = TypeVar("T")


@dataclass
class RandomSource:
    engine: str

    def random(self) -> float:
        raise NotImplementedError

    def randbelow(self, n: int) -> int:
        raise NotImplementedError

    def choice(self, seq: Sequence[T]) -> T:
        return seq[self.randbelow(len(seq))]

    def shuffle(self, arr: MutableSequence[T]) -> None:
        """In-place Fisher-Yates shuffle over 0-indexed positions."""
        for i in range(len(arr) - 1, 0, -1):
            j = self.randbelow(i + 1)
            arr[i], arr[j] = arr[j], arr[i]

    def shuffled(self, seq: Sequence[T]) -> List[T]:
        out = list(seq)
        self.shuffle(out)
        return out


class SystemRandomSource(RandomSource):
    """Process entropy; not reproducible across runs."""

    def __init__(self):
        super().__init__(engine="system")
        self._rng = random.SystemRandom()

    def random(self) -> float:
        return self._rng.random()

    def randbelow(self, n: int) -> int:
        return self._rng.randrange(n)


class PyRandomSource(RandomSource):
    def __init__(self, seed: Optional[int]):
        super().__init__(engine="py_random")
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def randbelow(self, n: int) -> int:
        return self._rng.randrange(n)


class NumpyPCG64Source(RandomSource):  # pragma: no cover - covered when numpy present
    def __init__(self, seed: Optional[int]):
        if _np is None:
            raise RuntimeError("numpy is not installed; install phrase-bingo[pcg]")
        super().__init__(engine="numpy_pcg64")
        self.seed = seed
        self._rng = _np.random.Generator(_np.random.PCG64(seed))

    def random(self) -> float:
        return float(self._rng.random())

    def randbelow(self, n: int) -> int:
        return int(self._rng.integers(low=0, high=n))


def create_rng(engine: str = "system", seed: Optional[int] = None) -> RandomSource:
    """Build a random source.

    ``system`` ignores the seed. The seeded engines fall back to ambient
    entropy when ``seed`` is None.
    """
    engine = (engine or "system").strip().lower()
    if engine == "system":
        return SystemRandomSource()
    if engine == "py_random":
        return PyRandomSource(seed)
    if engine == "numpy_pcg64":
        return NumpyPCG64Source(seed)
    raise ValueError(f"Unsupported RNG engine: {engine}")


def default_rng() -> RandomSource:
    return SystemRandomSource()
