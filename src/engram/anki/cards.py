"""Flashcard extraction from a topic.

CLOZE derivatives with {{cN::...}} markup become cloze notes, PROBING
derivatives become question/answer notes (the concept is the answer).
ELABORATION derivatives are notes to self and are skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal

from engram.editor.model import DerivativeType, Topic

log = logging.getLogger(__name__)

CLOZE_RE = re.compile(r"\{\{c(\d+)::(.*?)(?:::(.*?))?\}\}")


@dataclass(frozen=True)
class Card:
    kind: Literal["cloze", "basic"]
    front: str
    back: str
    source_id: str


def cloze_answers(text: str) -> list[str]:
    return [m.group(2) for m in CLOZE_RE.finditer(text)]


def extract_cards(topic: Topic) -> list[Card]:
    cards: list[Card] = []
    for concept in topic.concepts:
        for derivative in concept.derivatives:
            if not derivative.text.strip():
                continue
            if derivative.type == DerivativeType.CLOZE:
                if not CLOZE_RE.search(derivative.text):
                    continue
                cards.append(Card("cloze", derivative.text, concept.text, derivative.id))
            elif derivative.type == DerivativeType.PROBING:
                cards.append(Card("basic", derivative.text, concept.text, derivative.id))
    return cards


def render_tsv(cards: list[Card]) -> str:
    """Anki's plain-text import format: one note per line, tab-separated."""

    def cell(value: str) -> str:
        return value.replace("\t", " ").replace("\n", "<br>")

    return "".join(f"{card.kind}\t{cell(card.front)}\t{cell(card.back)}\n" for card in cards)


class AnkiSync:
    """Collects the cards of the last ankified topic."""

    def __init__(self) -> None:
        self.last_cards: list[Card] = []

    def __call__(self, topic: Topic) -> list[Card]:
        cards = extract_cards(topic)
        log.info("Prepared %d cards for topic %s", len(cards), topic.id)
        self.last_cards = cards
        return cards
