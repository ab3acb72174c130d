"""Commands the key tables resolve to.

Every command is a frozen dataclass; the engine registers exactly one
transition function per command type.
"""

from dataclasses import dataclass
from typing import Literal, Union

from engram.editor.model import DerivativeType


# =============================================================================
# BLOCK mode (structural)
# =============================================================================


@dataclass(frozen=True)
class MoveFocus:
    """Next/previous concept, or derivative when one is focused."""
    step: int


@dataclass(frozen=True)
class FocusConcept:
    pass


@dataclass(frozen=True)
class FocusDerivatives:
    pass


@dataclass(frozen=True)
class EnterNormal:
    at_end: bool = False


@dataclass(frozen=True)
class OpenConcept:
    """New empty concept after (or before) the focus."""
    above: bool = False


@dataclass(frozen=True)
class StartChord:
    key: str


@dataclass(frozen=True)
class AppendDerivative:
    type: DerivativeType


@dataclass(frozen=True)
class DeleteFocused:
    pass


@dataclass(frozen=True)
class DeleteTyped:
    type: DerivativeType


@dataclass(frozen=True)
class ChangeFocused:
    pass


@dataclass(frozen=True)
class ChangeTyped:
    type: DerivativeType


@dataclass(frozen=True)
class PickCandidate:
    number: int


# =============================================================================
# NORMAL mode (character level)
# =============================================================================


@dataclass(frozen=True)
class MoveCursor:
    motion: Literal["h", "l", "0", "$", "w", "b", "e", "j", "k"]


@dataclass(frozen=True)
class EnterInsert:
    where: Literal["i", "I", "a", "A", "o", "O"]


@dataclass(frozen=True)
class DeleteChar:
    pass


@dataclass(frozen=True)
class StartOperator:
    operator: Literal["d", "c", "y"]


@dataclass(frozen=True)
class ApplyOperator:
    operator: Literal["d", "c", "y"]
    motion: Literal["w", "e", "b", "line"]


# =============================================================================
# Shared
# =============================================================================


@dataclass(frozen=True)
class ToggleVisual:
    kind: Literal["text", "block"]


@dataclass(frozen=True)
class Yank:
    pass


@dataclass(frozen=True)
class Paste:
    pass


@dataclass(frozen=True)
class OpenSearch:
    pass


@dataclass(frozen=True)
class RepeatSearch:
    reverse: bool = False


@dataclass(frozen=True)
class Generate:
    """AI derivatives for the focused concept."""
    concept_focus_only: bool = False


@dataclass(frozen=True)
class Ankify:
    pass


@dataclass(frozen=True)
class OpenSwitcher:
    pass


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Redo:
    pass


@dataclass(frozen=True)
class Escape:
    pass


@dataclass(frozen=True)
class CancelPending:
    """Drop a half-typed chord or operator."""
    pass


Command = Union[
    MoveFocus,
    FocusConcept,
    FocusDerivatives,
    EnterNormal,
    OpenConcept,
    StartChord,
    AppendDerivative,
    DeleteFocused,
    DeleteTyped,
    ChangeFocused,
    ChangeTyped,
    PickCandidate,
    MoveCursor,
    EnterInsert,
    DeleteChar,
    StartOperator,
    ApplyOperator,
    ToggleVisual,
    Yank,
    Paste,
    OpenSearch,
    RepeatSearch,
    Generate,
    Ankify,
    OpenSwitcher,
    Undo,
    Redo,
    Escape,
    CancelPending,
]
