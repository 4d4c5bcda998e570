from __future__ import annotations

import pytest
from hypothesis import given, settings, strategies as st

from phrase_bingo import caller
from phrase_bingo.caller import CallerState, CallerStatus
from phrase_bingo.errors import DeckSizeExceedsPool, InvalidQuantity
from phrase_bingo.rng import create_rng


def test_start_dedupes_case_insensitively_before_size_check():
    with pytest.raises(DeckSizeExceedsPool) as info:
        caller.start(["A", "a", "B"], 3)
    assert info.value.deck_size == 3
    assert info.value.pool_size == 2


def test_start_builds_running_state(labels, rng):
    state = caller.start(labels, 12, rng=rng)
    assert len(state.deck) == 12
    assert len(set(state.deck)) == 12
    assert set(state.deck) <= set(labels)
    assert state.called == ()
    assert state.round == 0
    assert state.status is CallerStatus.RUNNING


def test_start_first_spelling_wins(rng):
    state = caller.start(["Cat", "CAT", "dog"], 2, rng=rng)
    assert sorted(state.deck) == ["Cat", "dog"]


@pytest.mark.parametrize("bad", [0, -3, True, "5"])
def test_start_rejects_non_positive_deck_size(labels, bad):
    with pytest.raises(InvalidQuantity):
        caller.start(labels, bad)


def test_draw_takes_front_of_remaining_in_deck_order(rng):
    state = caller.start(["a", "b", "c", "d", "e"], 5, rng=rng)
    deck = state.deck
    state, batch = caller.draw(state, 2)
    assert batch == deck[:2]
    assert state.round == 1
    state, batch = caller.draw(state, 2)
    assert batch == deck[2:4]
    state, batch = caller.draw(state, 2)
    assert batch == deck[4:]
    assert state.round == 3
    assert state.called == deck
    assert state.status is CallerStatus.EXHAUSTED


def test_draw_on_exhausted_deck_is_a_no_op(rng):
    state = caller.start(["a", "b"], 2, rng=rng)
    state, _ = caller.draw(state, 5)
    again, batch = caller.draw(state, 5)
    assert batch == ()
    assert again == state
    assert again.round == 1


def test_draw_before_start_returns_empty_batch():
    state, batch = caller.draw(caller.reset(), 3)
    assert batch == ()
    assert state.status is CallerStatus.NOT_STARTED


def test_draw_rejects_bad_batch_size(labels, rng):
    state = caller.start(labels, 5, rng=rng)
    with pytest.raises(InvalidQuantity):
        caller.draw(state, 0)


def test_draw_does_not_mutate_previous_state(labels, rng):
    state = caller.start(labels, 10, rng=rng)
    after, _ = caller.draw(state, 4)
    assert state.called == ()
    assert state.round == 0
    assert len(after.called) == 4


def test_reset_clears_everything(labels, rng):
    state = caller.start(labels, 10, rng=rng)
    state, _ = caller.draw(state, 3)
    cleared = caller.reset()
    assert cleared == CallerState()
    assert cleared.status is CallerStatus.NOT_STARTED


@settings(max_examples=50, deadline=None)
@given(
    pool_size=st.integers(min_value=1, max_value=40),
    batches=st.lists(st.integers(min_value=1, max_value=7), min_size=1, max_size=20),
    seed=st.integers(min_value=0, max_value=2**32),
)
def test_draws_never_repeat_and_concatenate_to_called(pool_size, batches, seed):
    pool = [f"T{i}" for i in range(pool_size)]
    state = caller.start(pool, pool_size, rng=create_rng("py_random", seed))
    seen = []
    for size in batches:
        state, batch = caller.draw(state, size)
        for label in batch:
            assert label not in seen
        seen.extend(batch)
        assert list(state.called) == seen
    assert list(state.called) == list(state.deck[: len(seen)])
