"""Compact share tokens for a single card.

A token is the base64 of the UTF-8 JSON envelope::

    {"v": 1, "packId": ..., "cardId": ..., "grid": [[...]], "title": ..., "sponsorName": ..., "freeCenter": ...}
"""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ShareDecodeError
from .models import Card, Grid, Pack, as_grid

SHARE_VERSION = 1


@dataclass(frozen=True)
class ShareEnvelope:
    pack_id: str
    card_id: str
    grid: Grid
    title: Optional[str] = None
    sponsor_name: Optional[str] = None
    free_center: bool = False

    def to_card(self) -> Card:
        return Card(id=self.card_id, grid=self.grid, free_center=self.free_center)


def envelope_for(pack: Pack, card: Card) -> ShareEnvelope:
    return ShareEnvelope(
        pack_id=pack.pack_id,
        card_id=card.id,
        grid=card.grid,
        title=pack.title or None,
        sponsor_name=pack.sponsor_name or None,
        free_center=card.free_center,
    )


def encode_card(envelope: ShareEnvelope) -> str:
    payload: Dict[str, Any] = {
        "v": SHARE_VERSION,
        "packId": envelope.pack_id,
        "cardId": envelope.card_id,
        "grid": [list(row) for row in envelope.grid],
        "freeCenter": envelope.free_center,
    }
    if envelope.title is not None:
        payload["title"] = envelope.title
    if envelope.sponsor_name is not None:
        payload["sponsorName"] = envelope.sponsor_name
    raw = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_card(token: str) -> ShareEnvelope:
    try:
        raw = base64.b64decode((token or "").strip(), validate=True)
        obj = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ShareDecodeError(f"Share token is not valid base64 JSON: {exc}") from exc

    if not isinstance(obj, dict) or obj.get("v") != SHARE_VERSION:
        raise ShareDecodeError("Unsupported share token version")
    pack_id = obj.get("packId")
    card_id = obj.get("cardId")
    if not isinstance(pack_id, str) or not pack_id or not isinstance(card_id, str) or not card_id:
        raise ShareDecodeError("Share token is missing packId or cardId")

    rows = obj.get("grid")
    if not isinstance(rows, list) or not rows or not all(isinstance(r, list) for r in rows):
        raise ShareDecodeError("Share token grid must be a list of rows")
    if any(len(r) != len(rows) for r in rows):
        raise ShareDecodeError("Share token grid must be square")

    title = obj.get("title")
    sponsor_name = obj.get("sponsorName")
    return ShareEnvelope(
        pack_id=pack_id,
        card_id=card_id,
        grid=as_grid(rows),
        title=title if isinstance(title, str) else None,
        sponsor_name=sponsor_name if isinstance(sponsor_name, str) else None,
        free_center=bool(obj.get("freeCenter", False)),
    )
