from __future__ import annotations

import csv
import json
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from .caller import CallerState
from .models import Card, Pack, as_grid
from .uniqueness import cards_hash, grid_hash, pool_hash


def ensure_parent(path: Path, *, mkdirs: bool) -> None:
    parent = path.parent
    if not parent.exists() and mkdirs:
        parent.mkdir(parents=True, exist_ok=True)


def _refuse_overwrite(path: Path, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )


def write_json(path: Path, data: object, *, mkdirs: bool, overwrite: bool) -> None:
    _refuse_overwrite(path, overwrite)
    ensure_parent(path, mkdirs=mkdirs)
    text = json.dumps(data, ensure_ascii=False, sort_keys=True, indent=2)
    path.write_text(text + "\n", encoding="utf-8")


def read_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def build_run_meta(
    *,
    app_version: str,
    params_hash: str,
    seed: Optional[int],
    rng_engine: str,
) -> Dict[str, object]:
    return {
        "app_version": app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "python_version": sys.version.split()[0],
        "platform": platform.system().lower(),
        "params_hash": params_hash,
        "seed": seed,
        "rng_engine": rng_engine,
        "hash_algorithm": "sha256",
    }


def card_to_dict(card: Card) -> Dict[str, object]:
    return {
        "id": card.id,
        "grid": [list(row) for row in card.grid],
        "free_center": card.free_center,
        "grid_hash": grid_hash(card.grid),
    }


def pack_to_dict(pack: Pack) -> Dict[str, object]:
    return {
        "pack_id": pack.pack_id,
        "created_at": pack.created_at,
        "title": pack.title,
        "sponsor_name": pack.sponsor_name,
        "grid_size": pack.grid_size,
        "free_center": pack.free_center,
        "free_label": pack.free_label,
        "pool": list(pack.pool),
        "pool_hash": pool_hash(pack.pool),
        "cards": [card_to_dict(c) for c in pack.cards],
        "cards_hash": cards_hash(c.grid for c in pack.cards),
    }


def pack_from_dict(data: Dict[str, Any]) -> Pack:
    if not isinstance(data, dict) or "pack_id" not in data:
        raise ValueError("Pack document must be a mapping with a pack_id")
    free_center = bool(data.get("free_center", False))
    cards = []
    for entry in data.get("cards") or []:
        cards.append(
            Card(
                id=str(entry["id"]),
                grid=as_grid(entry["grid"]),
                free_center=bool(entry.get("free_center", free_center)),
            )
        )
    grid_size = int(data.get("grid_size") or (len(cards[0].grid) if cards else 5))
    return Pack(
        pack_id=str(data["pack_id"]),
        created_at=str(data.get("created_at", "")),
        grid_size=grid_size,
        free_center=free_center,
        cards=tuple(cards),
        pool=tuple(str(x) for x in data.get("pool") or ()),
        title=str(data.get("title") or "Bingo"),
        sponsor_name=str(data.get("sponsor_name") or ""),
        free_label=str(data.get("free_label") or "FREE"),
    )


def emit_pack_json(
    path: Path,
    *,
    pack: Pack,
    run_meta: Dict[str, object],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    data = pack_to_dict(pack)
    data["run_meta"] = run_meta
    write_json(path, data, mkdirs=mkdirs, overwrite=overwrite)


def load_pack_json(path: Path) -> Pack:
    return pack_from_dict(read_json(path))


def emit_report_json(
    path: Path, *, report: Dict[str, object], mkdirs: bool, overwrite: bool
) -> None:
    write_json(path, report, mkdirs=mkdirs, overwrite=overwrite)


def emit_roster_csv(
    path: Path, *, cards: Sequence[Card], mkdirs: bool, overwrite: bool
) -> None:
    _refuse_overwrite(path, overwrite)
    ensure_parent(path, mkdirs=mkdirs)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["cardId"])
        for card in cards:
            writer.writerow([card.id])


def emit_summary_csv(
    path: Path,
    *,
    freqs: Dict[str, int],
    by_position: Dict[str, Dict[str, int]] | None,
    mkdirs: bool,
    overwrite: bool,
) -> None:
    _refuse_overwrite(path, overwrite)
    ensure_parent(path, mkdirs=mkdirs)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["label", "total"])
        for label in sorted(freqs.keys()):
            writer.writerow([label, freqs[label]])
        if by_position:
            writer.writerow([])
            writer.writerow(["position", "label", "count"])
            for pos in sorted(by_position.keys()):
                row = by_position[pos]
                for label in sorted(row.keys()):
                    writer.writerow([pos, label, row[label]])


def caller_state_to_dict(state: CallerState, *, pack_id: Optional[str] = None) -> Dict[str, object]:
    return {
        "pack_id": pack_id,
        "saved_at": datetime.now(timezone.utc).isoformat(),
        "deck": list(state.deck),
        "called": list(state.called),
        "round": state.round,
    }


def caller_state_from_dict(data: Dict[str, Any]) -> CallerState:
    if not isinstance(data, dict):
        raise ValueError("Caller state document must be a mapping")
    return CallerState(
        deck=tuple(str(x) for x in data.get("deck") or ()),
        called=tuple(str(x) for x in data.get("called") or ()),
        round=int(data.get("round") or 0),
    )


def emit_caller_state(
    path: Path, *, state: CallerState, pack_id: Optional[str] = None, mkdirs: bool = True
) -> None:
    # state files are rewritten after every draw
    write_json(path, caller_state_to_dict(state, pack_id=pack_id), mkdirs=mkdirs, overwrite=True)


def load_caller_state(path: Path) -> CallerState:
    if not path.exists():
        return CallerState()
    return caller_state_from_dict(read_json(path))


def load_caller_pack_id(path: Path) -> Optional[str]:
    if not path.exists():
        return None
    value = read_json(path).get("pack_id")
    return str(value) if value else None
