from __future__ import annotations

from dataclasses import replace

from phrase_bingo.core import BuildParams, PackBuilder
from phrase_bingo.models import Card
from phrase_bingo.rng import create_rng
from phrase_bingo.verify import chi2_wilson_hilferty_pvalue, uniformity_test, verify


def _pack(labels, **kwargs):
    params = BuildParams(pool=labels, quantity=kwargs.pop("quantity", 12), **kwargs)
    return PackBuilder(rng=create_rng("py_random", 123)).build(params).pack


def test_verify_reports_clean_pack(labels):
    pack = _pack(labels)
    rep = verify(pack)
    assert rep["card_count"] == 12
    assert rep["ok_grid_shapes"] is True
    assert rep["ok_free_cells"] is True
    assert rep["ok_no_duplicates_within_cards"] is True
    assert rep["ok_no_identical_cards"] is True
    assert sum(rep["frequencies"].values()) == 12 * 24
    assert set(rep["frequencies"]) == set(labels)
    assert "(2,2)" not in rep["position_frequencies"]
    assert rep["tests"]["labels"]["chi2"]["p_value"] >= 0.0


def test_verify_flags_broken_cards(labels):
    pack = _pack(labels, grid_size=3, quantity=2)
    first = pack.cards[0]
    dup_row = (first.grid[0][0],) * 3
    broken = Card(id="BAD", grid=(dup_row, first.grid[1], first.grid[2]), free_center=True)
    no_free = Card(id="NOFREE", grid=(first.grid[0], ("x", "y", "z"), first.grid[2]), free_center=True)
    pack = replace(pack, cards=(first, first, broken, no_free))
    rep = verify(pack)
    assert rep["ok_no_duplicates_within_cards"] is False
    assert rep["cards_with_duplicate_labels"] == ["BAD"]
    assert rep["identical_card_collisions"] == 1
    assert rep["ok_no_identical_cards"] is False
    assert rep["ok_free_cells"] is False


def test_uniformity_edge_cases():
    assert uniformity_test({})["chi2"]["p_value"] == 1.0
    even = uniformity_test({"a": 10, "b": 10, "c": 10})
    assert even["chi2"]["stat"] == 0.0
    assert even["max_minus_min"] == 0
    assert chi2_wilson_hilferty_pvalue(5.0, 0) == 1.0
