from __future__ import annotations

import hashlib
import json
from typing import Iterable, Sequence


def grid_hash(grid: Sequence[Sequence[str]]) -> str:
    payload = json.dumps([list(row) for row in grid], ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def cards_hash(grids: Iterable[Sequence[Sequence[str]]]) -> str:
    hashes = [grid_hash(g) for g in grids]
    payload = json.dumps(hashes, ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def pool_hash(pool: Sequence[str]) -> str:
    payload = json.dumps(list(pool), ensure_ascii=True, separators=(",", ":"))
    return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def duplicate_labels(cells: Sequence[str]) -> list[str]:
    """Labels occurring more than once among ``cells``, compared case-insensitively."""
    seen: set[str] = set()
    dupes: list[str] = []
    for cell in cells:
        key = cell.lower()
        if key in seen and cell not in dupes:
            dupes.append(cell)
        seen.add(key)
    return dupes
