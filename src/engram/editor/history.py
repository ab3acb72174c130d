"""Linear undo/redo over immutable document snapshots.

- Each entry is a full HistoryState: topic + focus
- push_state always clears the redo stack
- commit_from collapses an insert session into a single step
- Stacks are reset when another topic is loaded
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from engram.editor.model import Topic


@dataclass(frozen=True)
class HistoryState:
    topic: Topic
    cursor_idx: int = 0
    deriv_idx: int = -1


class History:
    """Undo/redo stacks around the present snapshot."""

    def __init__(self, initial: HistoryState) -> None:
        self._past: List[HistoryState] = []
        self._present = initial
        self._future: List[HistoryState] = []

    @property
    def present(self) -> HistoryState:
        return self._present

    def push_state(self, state: HistoryState) -> None:
        """Record the present and move to a new state; redo history is dropped."""
        self._past.append(self._present)
        self._present = state
        self._future.clear()

    def commit_from(self, base: HistoryState, state: HistoryState) -> None:
        """Like push_state, but records an explicit base instead of the present."""
        self._past.append(base)
        self._present = state
        self._future.clear()

    def replace_present(self, state: HistoryState) -> None:
        """Swap the present without touching either stack (focus moves, typing)."""
        self._present = state

    def can_undo(self) -> bool:
        return bool(self._past)

    def can_redo(self) -> bool:
        return bool(self._future)

    def undo(self) -> Optional[HistoryState]:
        if not self._past:
            return None
        self._future.insert(0, self._present)
        self._present = self._past.pop()
        return self._present

    def redo(self) -> Optional[HistoryState]:
        if not self._future:
            return None
        self._past.append(self._present)
        self._present = self._future.pop(0)
        return self._present

    def reset(self, state: HistoryState) -> None:
        """Drop all history (called when switching topics)."""
        self._past.clear()
        self._future.clear()
        self._present = state

    def __len__(self) -> int:
        """Number of undoable steps."""
        return len(self._past)

    def redo_len(self) -> int:
        """Number of redoable steps."""
        return len(self._future)
