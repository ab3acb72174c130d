"""Document model: topic -> concepts -> derivatives.

All entities are frozen dataclasses over tuples. Every operation takes a
Topic value (plus focus coordinates) and returns new values; nothing here
holds state, so two History snapshots never share anything mutable.

Focus is a pair (cursor_idx, deriv_idx):
- cursor_idx indexes topic.concepts
- deriv_idx == -1 focuses the concept itself
- deriv_idx >= 0 focuses a derivative (0 on a concept without derivatives
  is the empty derivative slot)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional


# =============================================================================
# Data Types
# =============================================================================


class DerivativeType(str, Enum):
    PROBING = "PROBING"
    CLOZE = "CLOZE"
    ELABORATION = "ELABORATION"

    @property
    def rank(self) -> int:
        return _RANK[self]


_RANK = {
    DerivativeType.PROBING: 0,
    DerivativeType.CLOZE: 1,
    DerivativeType.ELABORATION: 2,
}


@dataclass(frozen=True)
class Derivative:
    id: str
    type: DerivativeType
    text: str = ""
    ai_response: Optional[str] = None


@dataclass(frozen=True)
class Concept:
    id: str
    text: str = ""
    derivatives: tuple[Derivative, ...] = ()
    ai_response: Optional[str] = None


@dataclass(frozen=True)
class Topic:
    id: str
    title: str
    concepts: tuple[Concept, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class BlockRef:
    """One entry of the flattened document (concept, then its derivatives)."""

    cursor_idx: int
    deriv_idx: int
    concept: Concept
    derivative: Optional[Derivative] = None

    @property
    def kind(self) -> str:
        return "concept" if self.derivative is None else "derivative"

    @property
    def text(self) -> str:
        if self.derivative is not None:
            return self.derivative.text
        return self.concept.text


# =============================================================================
# Construction
# =============================================================================


def new_id() -> str:
    return str(uuid.uuid4())


def new_concept(text: str = "") -> Concept:
    return Concept(id=new_id(), text=text)


def new_derivative(type: DerivativeType, text: str = "") -> Derivative:
    return Derivative(id=new_id(), type=DerivativeType(type), text=text)


def empty_topic(title: str = "Untitled") -> Topic:
    return Topic(id=new_id(), title=title, concepts=(new_concept(),))


def clone_derivative(derivative: Derivative) -> Derivative:
    return replace(derivative, id=new_id())


def clone_concept(concept: Concept) -> Concept:
    return replace(
        concept,
        id=new_id(),
        derivatives=tuple(clone_derivative(d) for d in concept.derivatives),
    )


def sort_derivatives(derivatives) -> tuple[Derivative, ...]:
    """Sort by type rank. sorted() is stable, so same-type order is kept."""
    return tuple(sorted(derivatives, key=lambda d: d.type.rank))


# =============================================================================
# Lookups
# =============================================================================


def concept_at(topic: Topic, cursor_idx: int) -> Optional[Concept]:
    if 0 <= cursor_idx < len(topic.concepts):
        return topic.concepts[cursor_idx]
    return None


def focused_derivative(
    topic: Topic, cursor_idx: int, deriv_idx: int
) -> Optional[Derivative]:
    concept = concept_at(topic, cursor_idx)
    if concept is None or deriv_idx < 0:
        return None
    if deriv_idx < len(concept.derivatives):
        return concept.derivatives[deriv_idx]
    return None


def focused_text(topic: Topic, cursor_idx: int, deriv_idx: int) -> str:
    """Text of the focused field, or "" when nothing is there."""
    concept = concept_at(topic, cursor_idx)
    if concept is None:
        return ""
    if deriv_idx == -1:
        return concept.text
    derivative = focused_derivative(topic, cursor_idx, deriv_idx)
    return derivative.text if derivative is not None else ""


def has_focus_target(topic: Topic, cursor_idx: int, deriv_idx: int) -> bool:
    """False for the empty derivative slot (or a stale focus)."""
    if concept_at(topic, cursor_idx) is None:
        return False
    return deriv_idx == -1 or focused_derivative(topic, cursor_idx, deriv_idx) is not None


def flatten(topic: Topic) -> list[BlockRef]:
    items: list[BlockRef] = []
    for c_idx, concept in enumerate(topic.concepts):
        items.append(BlockRef(c_idx, -1, concept))
        for d_idx, derivative in enumerate(concept.derivatives):
            items.append(BlockRef(c_idx, d_idx, concept, derivative))
    return items


def flat_index(topic: Topic, cursor_idx: int, deriv_idx: int) -> int:
    """Position of a focus in flatten(topic), or -1."""
    for i, item in enumerate(flatten(topic)):
        if item.cursor_idx == cursor_idx and item.deriv_idx == deriv_idx:
            return i
    return -1


# =============================================================================
# Mutations (return new values)
# =============================================================================


def _with_concept(topic: Topic, cursor_idx: int, concept: Concept) -> Topic:
    concepts = list(topic.concepts)
    concepts[cursor_idx] = concept
    return replace(topic, concepts=tuple(concepts))


def insert_concept(topic: Topic, index: int, concept: Concept) -> Topic:
    index = max(0, min(index, len(topic.concepts)))
    concepts = list(topic.concepts)
    concepts.insert(index, concept)
    return replace(topic, concepts=tuple(concepts))


def remove_concept(topic: Topic, cursor_idx: int) -> tuple[Topic, int]:
    """Remove a concept; a topic never ends up without one."""
    concepts = [c for i, c in enumerate(topic.concepts) if i != cursor_idx]
    if not concepts:
        concepts = [new_concept()]
    new_cursor = max(0, min(cursor_idx, len(concepts) - 1))
    return replace(topic, concepts=tuple(concepts)), new_cursor


def insert_derivative(
    topic: Topic,
    cursor_idx: int,
    derivative: Derivative,
    index: Optional[int] = None,
) -> tuple[Topic, int]:
    """Insert and re-sort. Returns the derivative's index after sorting."""
    concept = concept_at(topic, cursor_idx)
    if concept is None:
        return topic, -1
    derivatives = list(concept.derivatives)
    if index is None:
        index = len(derivatives)
    derivatives.insert(max(0, min(index, len(derivatives))), derivative)
    ordered = sort_derivatives(derivatives)
    new_idx = next(i for i, d in enumerate(ordered) if d.id == derivative.id)
    return _with_concept(topic, cursor_idx, replace(concept, derivatives=ordered)), new_idx


def append_derivatives(topic: Topic, cursor_idx: int, derivatives) -> Topic:
    concept = concept_at(topic, cursor_idx)
    if concept is None:
        return topic
    merged = sort_derivatives([*concept.derivatives, *derivatives])
    return _with_concept(topic, cursor_idx, replace(concept, derivatives=merged))


def remove_derivative(topic: Topic, cursor_idx: int, deriv_idx: int) -> tuple[Topic, int]:
    """Remove the focused derivative; focus moves to the previous one (or the concept)."""
    concept = concept_at(topic, cursor_idx)
    if concept is None or not 0 <= deriv_idx < len(concept.derivatives):
        return topic, deriv_idx
    derivatives = tuple(d for i, d in enumerate(concept.derivatives) if i != deriv_idx)
    new_topic = _with_concept(topic, cursor_idx, replace(concept, derivatives=derivatives))
    return new_topic, max(-1, deriv_idx - 1)


def remove_derivative_by_id(topic: Topic, cursor_idx: int, derivative_id: str) -> Topic:
    concept = concept_at(topic, cursor_idx)
    if concept is None:
        return topic
    derivatives = tuple(d for d in concept.derivatives if d.id != derivative_id)
    return _with_concept(topic, cursor_idx, replace(concept, derivatives=derivatives))


def replace_text(topic: Topic, cursor_idx: int, deriv_idx: int, text: str) -> Topic:
    concept = concept_at(topic, cursor_idx)
    if concept is None:
        return topic
    if deriv_idx == -1:
        return _with_concept(topic, cursor_idx, replace(concept, text=text))
    if not 0 <= deriv_idx < len(concept.derivatives):
        return topic
    derivatives = list(concept.derivatives)
    derivatives[deriv_idx] = replace(derivatives[deriv_idx], text=text)
    return _with_concept(topic, cursor_idx, replace(concept, derivatives=tuple(derivatives)))


def rename_topic(topic: Topic, title: str) -> Topic:
    return replace(topic, title=title)


# =============================================================================
# Serialization
# =============================================================================


def _derivative_type(raw: Any) -> DerivativeType:
    try:
        return DerivativeType(str(raw).upper())
    except ValueError:
        return DerivativeType.CLOZE


def topic_to_dict(topic: Topic) -> dict:
    def deriv(d: Derivative) -> dict:
        out = {"id": d.id, "type": d.type.value, "text": d.text}
        if d.ai_response is not None:
            out["aiResponse"] = d.ai_response
        return out

    def concept(c: Concept) -> dict:
        out = {
            "id": c.id,
            "text": c.text,
            "derivatives": [deriv(d) for d in c.derivatives],
        }
        if c.ai_response is not None:
            out["aiResponse"] = c.ai_response
        return out

    return {
        "id": topic.id,
        "title": topic.title,
        "concepts": [concept(c) for c in topic.concepts],
    }


def topic_from_dict(data: dict) -> Topic:
    concepts = []
    for raw in data.get("concepts") or []:
        derivatives = [
            Derivative(
                id=str(d.get("id") or new_id()),
                type=_derivative_type(d.get("type")),
                text=str(d.get("text") or ""),
                ai_response=d.get("aiResponse"),
            )
            for d in raw.get("derivatives") or []
        ]
        concepts.append(
            Concept(
                id=str(raw.get("id") or new_id()),
                text=str(raw.get("text") or ""),
                derivatives=sort_derivatives(derivatives),
                ai_response=raw.get("aiResponse"),
            )
        )
    if not concepts:
        concepts = [new_concept()]
    return Topic(
        id=str(data.get("id") or new_id()),
        title=str(data.get("title") or "Untitled"),
        concepts=tuple(concepts),
    )
