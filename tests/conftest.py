"""Shared builders for engram tests.

Concepts are given as plain strings, or as (text, [(type, text), ...])
to attach derivatives.
"""

import pytest

from engram.editor.engine import Engine
from engram.editor.model import (
    Concept,
    DerivativeType,
    Topic,
    new_derivative,
    new_id,
    sort_derivatives,
)

NAMED_KEYS = {"escape", "enter", "backspace", "delete", "left", "right"}


def build_topic(*concepts, title="Test") -> Topic:
    built = []
    for item in concepts or ("",):
        if isinstance(item, str):
            built.append(Concept(id=new_id(), text=item))
            continue
        text, derivatives = item
        built.append(
            Concept(
                id=new_id(),
                text=text,
                derivatives=sort_derivatives(
                    new_derivative(DerivativeType(kind), body) for kind, body in derivatives
                ),
            )
        )
    return Topic(id=new_id(), title=title, concepts=tuple(built))


def press(engine: Engine, *sequences: str) -> None:
    """Feed keys: named keys as-is, anything else one character at a time."""
    for seq in sequences:
        if seq in NAMED_KEYS:
            engine.handle_key(seq)
        else:
            for ch in seq:
                engine.handle_key(ch)


@pytest.fixture
def make_topic():
    return build_topic


@pytest.fixture
def make_engine():
    def factory(*concepts, **kwargs):
        return Engine(build_topic(*concepts), **kwargs)

    return factory


@pytest.fixture
def keys():
    return press
