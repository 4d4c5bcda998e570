"""Pool text normalization.

A pool is entered as free text, one label per line. Normalizing trims every
line, drops blanks and removes case-insensitive duplicates while keeping the
first spelling seen.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List


def dedupe_labels(labels: Iterable[object]) -> List[str]:
    seen = set()
    out: List[str] = []
    for raw in labels:
        label = str(raw if raw is not None else "").strip()
        if not label:
            continue
        key = label.lower()
        if key in seen:
            continue
        seen.add(key)
        out.append(label)
    return out


def _split_lines(text: str) -> List[str]:
    return (text or "").replace("\r\n", "\n").replace("\r", "\n").split("\n")


def text_to_pool(text: str) -> List[str]:
    return dedupe_labels(_split_lines(text))


def normalize_pool_text(text: str) -> str:
    return "\n".join(text_to_pool(text))


def count_pool_items(text: str) -> int:
    return len(text_to_pool(text))


def load_pool_file(path: Path) -> List[str]:
    if not path.exists():
        raise FileNotFoundError(f"Pool file not found: {path}")
    return text_to_pool(path.read_text(encoding="utf-8"))


DEFAULT_POOL: List[str] = [
    "Someone is on mute",
    "Can you hear me?",
    "Dog barking",
    "Frozen screen",
    "Late joiner",
    "Wrong window shared",
    "Let's take this offline",
    "Echo on the line",
    "Kid walks in",
    "Coffee refill",
    "Forgot to unmute",
    "Bad Wi-Fi",
    "Circle back",
    "Next slide please",
    "Sorry, go ahead",
    "Camera off",
    "Doorbell rings",
    "Background noise",
    "Running over time",
    "Action items",
    "Any questions?",
    "Screen share fails",
    "Calendar conflict",
    "Quick sync",
    "Out of office",
    "Phone buzzing",
    "Hard stop",
    "Great question",
    "Let me check",
    "Thanks everyone",
]
