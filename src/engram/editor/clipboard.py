"""Visual selections and the yank buffer.

Two selection kinds:
- TextAnchor: a character offset inside the focused field (NORMAL mode)
- BlockAnchor: a focus pair; the range runs over flatten(topic)

The clipboard holds either text or structural blocks, never both.
Blocks are cloned on yank and cloned again on every paste, so pasted
entities always get fresh ids.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from engram.editor.model import (
    Concept,
    Derivative,
    Topic,
    clone_concept,
    clone_derivative,
    concept_at,
    flat_index,
    flatten,
    insert_concept,
    insert_derivative,
)


@dataclass(frozen=True)
class TextAnchor:
    cursor_idx: int
    deriv_idx: int
    char_index: int


@dataclass(frozen=True)
class BlockAnchor:
    cursor_idx: int
    deriv_idx: int


Visual = Union[TextAnchor, BlockAnchor, None]


@dataclass(frozen=True)
class YankedConcept:
    concept: Concept


@dataclass(frozen=True)
class YankedDerivative:
    derivative: Derivative


YankedItem = Union[YankedConcept, YankedDerivative]


class Clipboard:
    """Yank buffer: text or a sequence of blocks."""

    def __init__(self) -> None:
        self._text: Optional[str] = None
        self._blocks: tuple[YankedItem, ...] = ()

    @property
    def text(self) -> Optional[str]:
        return self._text

    @property
    def blocks(self) -> tuple[YankedItem, ...]:
        return self._blocks

    def is_empty(self) -> bool:
        return not self._text and not self._blocks

    def set_text(self, text: str) -> None:
        self._text = text
        self._blocks = ()

    def set_blocks(self, items) -> None:
        self._blocks = tuple(items)
        self._text = None


# =============================================================================
# Ranges
# =============================================================================


def text_selection(anchor: TextAnchor, cursor: int, text: str) -> str:
    """Inclusive [min, max] slice between anchor and cursor."""
    start = min(anchor.char_index, cursor)
    end = max(anchor.char_index, cursor)
    return text[start : end + 1]


def block_range(topic: Topic, anchor: BlockAnchor, cursor_idx: int, deriv_idx: int):
    """Flattened blocks between anchor and focus, inclusive, in document order."""
    items = flatten(topic)
    a = flat_index(topic, anchor.cursor_idx, anchor.deriv_idx)
    b = flat_index(topic, cursor_idx, deriv_idx)
    if a == -1 or b == -1:
        return []
    start, end = (a, b) if a <= b else (b, a)
    return items[start : end + 1]


def is_block_selected(
    topic: Topic,
    anchor: BlockAnchor,
    cursor_idx: int,
    deriv_idx: int,
    target_cursor: int,
    target_deriv: int,
) -> bool:
    return any(
        item.cursor_idx == target_cursor and item.deriv_idx == target_deriv
        for item in block_range(topic, anchor, cursor_idx, deriv_idx)
    )


def yank_refs(refs) -> list[YankedItem]:
    """Snapshot flattened refs as clones, concepts and derivatives independently."""
    out: list[YankedItem] = []
    for ref in refs:
        if ref.derivative is None:
            out.append(YankedConcept(clone_concept(ref.concept)))
        else:
            out.append(YankedDerivative(clone_derivative(ref.derivative)))
    return out


# =============================================================================
# Paste
# =============================================================================


def paste_text(text: str, cursor: int, clip: str) -> tuple[str, int]:
    """Insert clip at cursor; the cursor lands just past the inserted text."""
    at = max(0, min(len(text), cursor))
    return text[:at] + clip + text[at:], at + len(clip)


def paste_blocks(
    topic: Topic, cursor_idx: int, deriv_idx: int, items
) -> tuple[Topic, int, int]:
    """Insert clones after the focus, advancing the insertion point each time."""
    for item in items:
        if isinstance(item, YankedConcept):
            index = min(len(topic.concepts), cursor_idx + 1)
            topic = insert_concept(topic, index, clone_concept(item.concept))
            cursor_idx, deriv_idx = index, -1
            continue

        concept = concept_at(topic, cursor_idx)
        if concept is None:
            continue
        if deriv_idx >= 0:
            index = min(len(concept.derivatives), deriv_idx + 1)
        else:
            index = len(concept.derivatives)
        topic, deriv_idx = insert_derivative(
            topic, cursor_idx, clone_derivative(item.derivative), index
        )
    return topic, cursor_idx, deriv_idx
