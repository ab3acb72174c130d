"""Key tables: (mode, chord) -> {key: Command}.

Keys arrive as single printable characters or as named keys
("escape", "enter", "backspace", "delete", "left", "right").
The leader is the space character.
"""

from __future__ import annotations

from typing import Optional

from engram.editor.commands import (
    AppendDerivative,
    Ankify,
    ApplyOperator,
    CancelPending,
    ChangeFocused,
    ChangeTyped,
    Command,
    DeleteChar,
    DeleteFocused,
    DeleteTyped,
    EnterInsert,
    EnterNormal,
    Escape,
    FocusConcept,
    FocusDerivatives,
    Generate,
    MoveCursor,
    MoveFocus,
    OpenConcept,
    OpenSearch,
    OpenSwitcher,
    Paste,
    Redo,
    RepeatSearch,
    StartChord,
    StartOperator,
    ToggleVisual,
    Undo,
    Yank,
)
from engram.editor.model import DerivativeType
from engram.editor.state import LEADER

ESCAPE = "escape"
ENTER = "enter"
BACKSPACE = "backspace"
DELETE = "delete"
LEFT = "left"
RIGHT = "right"

PROBING = DerivativeType.PROBING
CLOZE = DerivativeType.CLOZE
ELABORATION = DerivativeType.ELABORATION

LEADER_KEYS: dict[str, Command] = {
    "g": Generate(),
    "f": Ankify(),
    "a": OpenSwitcher(),
}

OPERATOR_MOTIONS = ("w", "e", "b")


def is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def _shared(redo_key: str) -> dict[str, Command]:
    return {
        "/": OpenSearch(),
        "n": RepeatSearch(),
        "N": RepeatSearch(reverse=True),
        "u": Undo(),
        redo_key: Redo(),
        LEADER: StartChord(LEADER),
    }


def _block(redo_key: str) -> dict[str, Command]:
    table: dict[str, Command] = {
        "j": MoveFocus(1),
        "k": MoveFocus(-1),
        "h": FocusConcept(),
        "l": FocusDerivatives(),
        "i": EnterNormal(),
        "a": EnterNormal(at_end=True),
        "o": OpenConcept(),
        "O": OpenConcept(above=True),
        "d": StartChord("d"),
        "c": StartChord("c"),
        "v": ToggleVisual("block"),
        "y": Yank(),
        "p": Paste(),
        "g": Generate(concept_focus_only=True),
        "z": Ankify(),
        ESCAPE: Escape(),
    }
    table.update(_shared(redo_key))
    return table


def _normal(redo_key: str) -> dict[str, Command]:
    table: dict[str, Command] = {
        "h": MoveCursor("h"),
        LEFT: MoveCursor("h"),
        "l": MoveCursor("l"),
        RIGHT: MoveCursor("l"),
        "0": MoveCursor("0"),
        "$": MoveCursor("$"),
        "w": MoveCursor("w"),
        "b": MoveCursor("b"),
        "e": MoveCursor("e"),
        "j": MoveCursor("j"),
        "k": MoveCursor("k"),
        "i": EnterInsert("i"),
        "I": EnterInsert("I"),
        "a": EnterInsert("a"),
        "A": EnterInsert("A"),
        "o": EnterInsert("o"),
        "O": EnterInsert("O"),
        "x": DeleteChar(),
        "d": StartOperator("d"),
        "c": StartOperator("c"),
        # Yank decides between a text selection and the operator
        "y": Yank(),
        "v": ToggleVisual("text"),
        "p": Paste(),
        ESCAPE: Escape(),
    }
    table.update(_shared(redo_key))
    return table


def build_keymap(redo_key: str = "r") -> dict[tuple[str, str], dict[str, Command]]:
    return {
        ("BLOCK", ""): _block(redo_key),
        ("BLOCK", "d"): {
            "d": DeleteFocused(),
            "p": DeleteTyped(PROBING),
            "c": DeleteTyped(CLOZE),
            "e": DeleteTyped(ELABORATION),
            ESCAPE: CancelPending(),
        },
        ("BLOCK", "c"): {
            "c": ChangeFocused(),
            "p": ChangeTyped(PROBING),
            "l": ChangeTyped(CLOZE),
            "e": ChangeTyped(ELABORATION),
            ESCAPE: CancelPending(),
        },
        ("BLOCK", "o"): {
            "p": AppendDerivative(PROBING),
            "c": AppendDerivative(CLOZE),
            "e": AppendDerivative(ELABORATION),
            ESCAPE: CancelPending(),
        },
        ("NORMAL", ""): _normal(redo_key),
    }


def operator_command(operator: str, key: str) -> Optional[Command]:
    """Second key after a NORMAL operator; None cancels the operator."""
    if key == operator:
        return ApplyOperator(operator, "line")
    if key in OPERATOR_MOTIONS:
        return ApplyOperator(operator, key)
    return None


class Keymap:
    """Lookup over the mode tables."""

    def __init__(self, redo_key: str = "r") -> None:
        self.redo_key = redo_key
        self._tables = build_keymap(redo_key)

    def lookup(self, mode: str, chord: str, key: str) -> Optional[Command]:
        table = self._tables.get((mode, chord))
        if table is None:
            return None
        return table.get(key)

    def keys(self, mode: str, chord: str = "") -> list[str]:
        return list(self._tables.get((mode, chord), {}))
