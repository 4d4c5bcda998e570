from __future__ import annotations

import pytest
from hypothesis import given, settings, strategies as st

from phrase_bingo.builder.cards import GenerationStats, generate, generate_cards
from phrase_bingo.errors import InsufficientPoolSize, InvalidGridSize, InvalidQuantity
from phrase_bingo.ids import ID_ALPHABET
from phrase_bingo.layout import usable_cell_count
from phrase_bingo.rng import PyRandomSource, create_rng


@settings(max_examples=40, deadline=None)
@given(
    grid_size=st.sampled_from([3, 4, 5]),
    free_center=st.booleans(),
    quantity=st.integers(min_value=1, max_value=25),
    extra=st.integers(min_value=0, max_value=15),
    seed=st.integers(min_value=0, max_value=2**32),
)
def test_generate_shapes_and_no_repeats_within_card(grid_size, free_center, quantity, extra, seed):
    need = usable_cell_count(grid_size, free_center)
    pool = [f"Label {i}" for i in range(need + extra)]
    cards = generate_cards(
        pool, quantity, grid_size, free_center, rng=create_rng("py_random", seed)
    )
    assert len(cards) == quantity
    for card in cards:
        assert len(card.grid) == grid_size
        assert all(len(row) == grid_size for row in card.grid)
        assert len(card.labels) == need
        assert len(set(card.labels)) == need
        assert set(card.labels) <= set(pool)


def test_free_center_holds_marker(labels, rng):
    cards = generate_cards(labels, 10, 5, True, rng=rng, free_label="FREE SPACE")
    for card in cards:
        assert card.grid[2][2] == "FREE SPACE"
        assert "FREE SPACE" not in card.labels


def test_even_grid_has_no_free_cell(labels, rng):
    cards = generate_cards(labels, 3, 4, True, rng=rng)
    for card in cards:
        assert card.free_cell is None
        assert "FREE" not in card.labels
        assert len(card.labels) == 16


def test_insufficient_pool_reports_required_and_actual(rng):
    pool = [f"L{i}" for i in range(20)]
    with pytest.raises(InsufficientPoolSize) as info:
        generate_cards(pool, 5, 5, True, rng=rng)
    assert info.value.required == 24
    assert info.value.actual == 20


def test_exact_pool_size_is_enough(rng):
    pool = [f"L{i}" for i in range(8)]
    cards = generate_cards(pool, 4, 3, True, rng=rng)
    for card in cards:
        assert sorted(card.labels) == sorted(pool)


@pytest.mark.parametrize("bad", [0, -1, 501, True, 2.5, "10", None])
def test_invalid_quantity(labels, bad):
    with pytest.raises(InvalidQuantity):
        generate_cards(labels, bad)


def test_quantity_upper_bound_accepted(labels, rng):
    assert len(generate_cards(labels, 500, 3, True, rng=rng)) == 500


def test_invalid_grid_size_checked_first(rng):
    with pytest.raises(InvalidGridSize):
        generate_cards([], 0, 6, rng=rng)


def test_card_ids_unique_and_prefixed(labels, rng):
    cards = generate_cards(labels, 200, 3, False, rng=rng, id_prefix="GAME")
    ids = [c.id for c in cards]
    assert len(set(ids)) == len(ids)
    for card_id in ids:
        prefix, token = card_id.split("-")
        assert prefix == "GAME"
        assert len(token) == 6
        assert set(token) <= set(ID_ALPHABET)


def test_seeded_generation_is_reproducible(labels):
    a = generate_cards(labels, 5, rng=create_rng("py_random", 99))
    b = generate_cards(labels, 5, rng=create_rng("py_random", 99))
    assert a == b


def test_distinct_cards_when_pool_allows(labels, rng):
    cards = generate_cards(labels, 100, 5, True, rng=rng)
    assert len({c.grid for c in cards}) == 100


def test_duplicate_fallback_is_counted(rng):
    # one attempt per card: every repeated layout is a fallback
    pool = [f"L{i}" for i in range(8)]
    stats = GenerationStats()
    cards = generate_cards(pool, 500, 3, True, rng=rng, max_attempts_per_card=1, stats=stats)
    assert len(cards) == 500
    assert stats.attempts == 500
    assert stats.duplicate_fallbacks == 500 - len({c.grid for c in cards})


def test_generate_alias():
    assert generate is generate_cards


class _FrozenShuffle(PyRandomSource):
    def shuffle(self, arr):
        pass


def test_retry_bound_then_best_effort_when_every_deal_repeats():
    pool = [f"L{i}" for i in range(8)]
    stats = GenerationStats()
    cards = generate_cards(
        pool, 3, 3, True, rng=_FrozenShuffle(1), max_attempts_per_card=4, stats=stats
    )
    assert len(cards) == 3
    assert len({c.grid for c in cards}) == 1
    assert stats.duplicate_fallbacks == 2
    assert stats.attempts == 1 + 4 + 4
    assert len({c.id for c in cards}) == 3
