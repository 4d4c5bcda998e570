from __future__ import annotations

from pathlib import Path

import pytest

from phrase_bingo.pool import (
    DEFAULT_POOL,
    count_pool_items,
    dedupe_labels,
    load_pool_file,
    normalize_pool_text,
    text_to_pool,
)


def test_text_to_pool_trims_drops_blanks_and_dedupes_case_insensitively():
    text = "  Coffee \r\n\r\ncoffee\nTea\rTEA\n  \nWater"
    assert text_to_pool(text) == ["Coffee", "Tea", "Water"]


def test_normalize_and_count():
    text = "b\nB\na\n"
    assert normalize_pool_text(text) == "b\na"
    assert count_pool_items(text) == 2
    assert count_pool_items("") == 0


def test_dedupe_labels_keeps_first_spelling():
    assert dedupe_labels(["Dog", "DOG", None, "", "cat", "Cat "]) == ["Dog", "cat"]


def test_load_pool_file(tmp_path: Path):
    path = tmp_path / "pool.txt"
    path.write_text("one\ntwo\nOne\n", encoding="utf-8")
    assert load_pool_file(path) == ["one", "two"]
    with pytest.raises(FileNotFoundError):
        load_pool_file(tmp_path / "missing.txt")


def test_default_pool_fills_a_five_by_five_card():
    assert len(dedupe_labels(DEFAULT_POOL)) == len(DEFAULT_POOL) >= 24
