from __future__ import annotations

import pytest

from phrase_bingo.rng import create_rng


@pytest.fixture
def labels():
    return [f"Phrase {i:02d}" for i in range(1, 31)]


@pytest.fixture
def rng():
    return create_rng("py_random", 20250824)
