"""Incremental search across every text field of a topic."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from engram.editor.model import Topic, flatten


@dataclass(frozen=True)
class SearchEntry:
    cursor_idx: int
    deriv_idx: int
    text: str


@dataclass(frozen=True)
class SearchHit:
    cursor_idx: int
    deriv_idx: int
    offset: int


def entries(topic: Topic) -> list[SearchEntry]:
    return [SearchEntry(ref.cursor_idx, ref.deriv_idx, ref.text) for ref in flatten(topic)]


def _scan_order(count: int, current: int, reverse: bool) -> list[int]:
    """Every index once, starting next to `current` and ending on it."""
    step = -1 if reverse else 1
    return [(current + step * k) % count for k in range(1, count + 1)]


def find(
    topic: Topic,
    cursor_idx: int,
    deriv_idx: int,
    query: str,
    reverse: bool = False,
) -> Optional[SearchHit]:
    """Case-insensitive, cyclic substring search starting beside the focus."""
    if not query:
        return None
    needle = query.lower()
    items = entries(topic)
    if not items:
        return None

    current = next(
        (
            i
            for i, item in enumerate(items)
            if item.cursor_idx == cursor_idx and item.deriv_idx == deriv_idx
        ),
        0,
    )

    for i in _scan_order(len(items), current, reverse):
        offset = items[i].text.lower().find(needle)
        if offset != -1:
            return SearchHit(items[i].cursor_idx, items[i].deriv_idx, offset)
    return None


def match_ranges(text: str, query: str) -> list[tuple[int, int]]:
    """All non-overlapping (start, end) matches, for highlighting."""
    if not query:
        return []
    haystack = text.lower()
    needle = query.lower()
    ranges = []
    start = haystack.find(needle)
    while start != -1:
        ranges.append((start, start + len(needle)))
        start = haystack.find(needle, start + len(needle))
    return ranges
