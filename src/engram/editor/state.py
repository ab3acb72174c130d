"""
Editor state for the modal engine.

Architecture:
- EditorState is the single mutable record the engine owns
- The document itself lives in History.present (topic + focus)
- Everything here is "transient" state: mode, pending keys, selections
"""

from dataclasses import dataclass
from typing import Literal, Optional

from engram.editor.clipboard import BlockAnchor, TextAnchor, Visual
from engram.editor.history import HistoryState
from engram.editor.model import Derivative, DerivativeType


# =============================================================================
# Data Types
# =============================================================================

ModeName = Literal["BLOCK", "NORMAL", "INSERT"]
ChordKey = Literal["", "d", "c", "o", " "]
OperatorKey = Literal["", "d", "c", "y"]
PickAction = Literal["DELETE", "CHANGE"]

LEADER = " "


@dataclass(frozen=True)
class CandidatePick:
    """Ambiguous typed delete/change waiting for a digit."""
    action: PickAction
    type: DerivativeType
    candidates: tuple[Derivative, ...]


@dataclass
class InsertSession:
    """One stay in INSERT mode.

    base: the present state when the session started
    dirty: any text changed during the session
    skip_commit: the command that opened the session already pushed history
    """
    base: HistoryState
    dirty: bool = False
    skip_commit: bool = False


# =============================================================================
# Editor State
# =============================================================================


@dataclass
class EditorState:
    mode: ModeName = "BLOCK"

    # Character cursor inside the focused field
    char_cursor: int = 0

    # Buffered prefix awaiting a second key (BLOCK chords and the leader)
    chord: ChordKey = ""

    # NORMAL-mode operator awaiting a motion
    operator: OperatorKey = ""

    visual: Visual = None
    pending: Optional[CandidatePick] = None

    # Open search prompt text, None when closed
    search: Optional[str] = None
    last_search: str = ""

    session: Optional[InsertSession] = None

    # Collaborator status
    generating: bool = False
    ankify_status: Literal["IDLE", "SUCCESS"] = "IDLE"

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def leader_active(self) -> bool:
        return self.chord == LEADER

    @property
    def text_anchor(self) -> Optional[TextAnchor]:
        return self.visual if isinstance(self.visual, TextAnchor) else None

    @property
    def block_anchor(self) -> Optional[BlockAnchor]:
        return self.visual if isinstance(self.visual, BlockAnchor) else None

    @property
    def key_buffer(self) -> str:
        """What the mode line shows as the pending chord."""
        if self.leader_active:
            return "<space>"
        return self.chord or self.operator
