"""
Modal editing engine.

The Engine owns one canonical document (History.present) plus the
transient EditorState, and turns key names into state transitions.

Key resolution order:
1. topic switcher (when open)
2. search prompt (when open)
3. leader chord
4. candidate pick
5. INSERT text editing
6. pending NORMAL operator
7. the (mode, chord) key table

Every command type has exactly one transition function, registered
with @transition. Transitions never raise; impossible requests are no-ops.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Optional

from engram.anki.cards import AnkiSync
from engram.ai.generate import normalize_derivatives
from engram.editor import commands as cmd
from engram.editor.clipboard import (
    BlockAnchor,
    Clipboard,
    TextAnchor,
    block_range,
    is_block_selected,
    paste_blocks,
    paste_text,
    text_selection,
    yank_refs,
)
from engram.editor.history import History, HistoryState
from engram.editor.keymap import (
    BACKSPACE,
    DELETE,
    ENTER,
    ESCAPE,
    LEADER_KEYS,
    LEFT,
    RIGHT,
    Keymap,
    is_printable,
    operator_command,
)
from engram.editor.model import (
    Derivative,
    Topic,
    append_derivatives,
    concept_at,
    empty_topic,
    flat_index,
    flatten,
    focused_derivative,
    focused_text,
    has_focus_target,
    insert_concept,
    insert_derivative,
    new_concept,
    new_derivative,
    remove_concept,
    remove_derivative,
    remove_derivative_by_id,
    rename_topic,
    replace_text,
)
from engram.editor.motion import (
    clamp,
    line_delete_range,
    line_end,
    line_last_char,
    line_start,
    move_line,
    next_word_start,
    operator_range,
    prev_word_start,
    word_end,
)
from engram.editor.search import find
from engram.editor.state import CandidatePick, EditorState, InsertSession, ModeName
from engram.editor.switcher import TopicSwitcher

log = logging.getLogger(__name__)

MAX_CANDIDATES = 9
PICK_KEYS = tuple(str(n) for n in range(1, MAX_CANDIDATES + 1))

Listener = Callable[[HistoryState], None]
Scheduler = Callable[[Awaitable[Any]], Any]


@dataclass(frozen=True)
class EditorSettings:
    redo_key: str = "r"
    show_key_buffer: bool = True

    @classmethod
    def from_config(cls, cfg: Optional[dict]) -> "EditorSettings":
        section = (cfg or {}).get("editor") or {}
        return cls(
            redo_key=str(section.get("redo_key") or "r"),
            show_key_buffer=bool(section.get("show_key_buffer", True)),
        )


@dataclass(frozen=True)
class KeyResult:
    """Result of processing a key event."""

    consumed: bool = True


@dataclass(frozen=True)
class GenerationRequest:
    concept_id: str
    text: str


_TRANSITIONS: dict[type, Callable[["Engine", Any], None]] = {}


def transition(command_type: type):
    """Register the transition function for one command type."""

    def decorator(func):
        if command_type in _TRANSITIONS:
            raise ValueError(f"Duplicate transition for {command_type.__name__}")
        _TRANSITIONS[command_type] = func
        return func

    return decorator


class Engine:
    def __init__(
        self,
        topic: Optional[Topic] = None,
        *,
        settings: Optional[EditorSettings] = None,
        generator=None,
        scheduler: Optional[Scheduler] = None,
        store=None,
        owner_id: Optional[str] = None,
        ankify=None,
    ) -> None:
        self.settings = settings or EditorSettings()
        self.history = History(HistoryState(topic or empty_topic()))
        self.state = EditorState()
        self.clipboard = Clipboard()
        self.keymap = Keymap(self.settings.redo_key)

        self.generator = generator
        self.scheduler = scheduler
        self.store = store
        self.owner_id = owner_id
        self.ankify = ankify if ankify is not None else AnkiSync()
        self.switcher = (
            TopicSwitcher(store, owner_id)
            if store is not None and owner_id is not None
            else None
        )

        self._listeners: list[Listener] = []

    # =========================================================================
    # Present state
    # =========================================================================

    @property
    def present(self) -> HistoryState:
        return self.history.present

    @property
    def topic(self) -> Topic:
        return self.history.present.topic

    @property
    def cursor_idx(self) -> int:
        return self.history.present.cursor_idx

    @property
    def deriv_idx(self) -> int:
        return self.history.present.deriv_idx

    @property
    def mode(self) -> ModeName:
        return self.state.mode

    @property
    def text(self) -> str:
        """Text of the focused field."""
        return focused_text(self.topic, self.cursor_idx, self.deriv_idx)

    @property
    def has_target(self) -> bool:
        return has_focus_target(self.topic, self.cursor_idx, self.deriv_idx)

    @property
    def mode_label(self) -> str:
        if self.state.visual is not None:
            return "VISUAL"
        if self.state.mode == "BLOCK":
            return "BLOCK - CONCEPT" if self.deriv_idx == -1 else "BLOCK - DERIVATIVE"
        return self.state.mode

    def is_block_selected(self, cursor_idx: int, deriv_idx: int) -> bool:
        anchor = self.state.block_anchor
        if anchor is None:
            return False
        return is_block_selected(
            self.topic, anchor, self.cursor_idx, self.deriv_idx, cursor_idx, deriv_idx
        )

    def text_selection_range(self) -> Optional[tuple[int, int]]:
        """Inclusive selection bounds inside the focused field."""
        anchor = self._live_text_anchor()
        if anchor is None:
            return None
        return (
            min(anchor.char_index, self.state.char_cursor),
            max(anchor.char_index, self.state.char_cursor),
        )

    # =========================================================================
    # Listeners
    # =========================================================================

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with the present state after every document change."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        present = self.history.present
        for listener in list(self._listeners):
            listener(present)

    # =========================================================================
    # History helpers
    # =========================================================================

    def _set_focus(self, cursor_idx: int, deriv_idx: int) -> None:
        self.history.replace_present(HistoryState(self.topic, cursor_idx, deriv_idx))
        self._drop_stale_text_anchor()

    def _push(
        self,
        topic: Topic,
        cursor_idx: Optional[int] = None,
        deriv_idx: Optional[int] = None,
    ) -> None:
        self.history.push_state(
            HistoryState(
                topic,
                self.cursor_idx if cursor_idx is None else cursor_idx,
                self.deriv_idx if deriv_idx is None else deriv_idx,
            )
        )
        self._drop_stale_text_anchor()
        self._clamp_cursor()
        self._notify()

    def _after_jump(self) -> None:
        self.state.pending = None
        self.state.visual = None
        self.state.operator = ""
        if self.state.mode == "NORMAL" and not self.has_target:
            self.state.mode = "BLOCK"
        self._clamp_cursor()
        self._notify()

    def _clamp_cursor(self) -> None:
        self.state.char_cursor = clamp(self.state.char_cursor, 0, len(self.text))

    def _live_text_anchor(self) -> Optional[TextAnchor]:
        anchor = self.state.text_anchor
        if anchor is None or self.state.mode != "NORMAL":
            return None
        if (anchor.cursor_idx, anchor.deriv_idx) != (self.cursor_idx, self.deriv_idx):
            return None
        return anchor

    def _drop_stale_text_anchor(self) -> None:
        if self.state.text_anchor is not None and self._live_text_anchor() is None:
            self.state.visual = None

    # =========================================================================
    # Modes and insert sessions
    # =========================================================================

    def _enter_mode(self, mode: ModeName) -> None:
        if mode == self.state.mode:
            return
        if isinstance(self.state.visual, TextAnchor) and self.state.mode == "NORMAL":
            self.state.visual = None
        if isinstance(self.state.visual, BlockAnchor) and self.state.mode == "BLOCK":
            self.state.visual = None
        self.state.chord = ""
        self.state.operator = ""
        self.state.mode = mode

    def _begin_insert(self, cursor: int, skip_commit: bool = False) -> None:
        self.state.session = InsertSession(self.history.present, skip_commit=skip_commit)
        self._enter_mode("INSERT")
        self.state.char_cursor = clamp(cursor, 0, len(self.text))

    def _end_insert(self) -> None:
        session = self.state.session
        self.state.session = None
        if session is not None and session.dirty and not session.skip_commit:
            self.history.commit_from(session.base, self.history.present)
        self._enter_mode("NORMAL")
        self.state.char_cursor = max(0, self.state.char_cursor - 1)

    def _edit(self, text: str, cursor: int) -> None:
        topic = replace_text(self.topic, self.cursor_idx, self.deriv_idx, text)
        self.history.replace_present(HistoryState(topic, self.cursor_idx, self.deriv_idx))
        if self.state.session is not None:
            self.state.session.dirty = True
        self.state.char_cursor = clamp(cursor, 0, len(text))
        self._notify()

    def set_text(self, text: str, cursor: Optional[int] = None) -> None:
        """Replace the focused text during INSERT, as typed keys would."""
        if self.state.mode != "INSERT" or not self.has_target:
            return
        self._edit(text, len(text) if cursor is None else cursor)

    # =========================================================================
    # Key handling
    # =========================================================================

    def handle_key(self, key: str) -> KeyResult:
        """Process one key.

        Args:
            key: a printable character or a named key ("escape", "enter", ...)
        """
        if self.switcher is not None and self.switcher.is_open:
            return self._handle_switcher_key(key)

        if self.state.search is not None:
            return self._handle_search_key(key)

        if self.state.leader_active:
            self.state.chord = ""
            command = LEADER_KEYS.get(key)
            if command is not None:
                self.apply(command)
            return KeyResult()

        if self.state.pending is not None:
            return self._handle_pick_key(key)

        if self.state.mode == "INSERT":
            return self._handle_insert_key(key)

        if self.state.mode == "NORMAL" and self.state.operator:
            operator = self.state.operator
            self.state.operator = ""
            command = operator_command(operator, key)
            if command is not None:
                self.apply(command)
            return KeyResult()

        chord = self.state.chord
        self.state.chord = ""
        command = self.keymap.lookup(self.state.mode, chord, key)
        if command is None:
            return KeyResult(consumed=bool(chord))
        self.apply(command)
        return KeyResult()

    def apply(self, command: cmd.Command) -> None:
        _TRANSITIONS[type(command)](self, command)

    def _handle_insert_key(self, key: str) -> KeyResult:
        text = self.text
        cur = clamp(self.state.char_cursor, 0, len(text))

        if key == ESCAPE:
            self._end_insert()
        elif key == ENTER:
            self._edit(text[:cur] + "\n" + text[cur:], cur + 1)
        elif key == BACKSPACE:
            if cur > 0:
                self._edit(text[: cur - 1] + text[cur:], cur - 1)
        elif key == DELETE:
            if cur < len(text):
                self._edit(text[:cur] + text[cur + 1 :], cur)
        elif key == LEFT:
            self.state.char_cursor = max(0, cur - 1)
        elif key == RIGHT:
            self.state.char_cursor = min(len(text), cur + 1)
        elif is_printable(key):
            self._edit(text[:cur] + key + text[cur:], cur + 1)
        else:
            return KeyResult(consumed=False)
        return KeyResult()

    def _handle_search_key(self, key: str) -> KeyResult:
        query = self.state.search or ""
        if key == ESCAPE:
            self.state.search = None
        elif key == ENTER:
            self.state.search = None
            if query:
                self.state.last_search = query
                self._navigate(query, reverse=False)
        elif key == BACKSPACE:
            self.state.search = query[:-1]
        elif is_printable(key):
            self.state.search = query + key
        return KeyResult()

    def _handle_pick_key(self, key: str) -> KeyResult:
        pick = self.state.pending
        if key == ESCAPE:
            self.state.pending = None
        elif key in PICK_KEYS and pick is not None and 1 <= int(key) <= len(pick.candidates):
            self.apply(cmd.PickCandidate(int(key)))
        return KeyResult()

    def _handle_switcher_key(self, key: str) -> KeyResult:
        try:
            result = self.switcher.handle_key(key)
            if result.open_topic_id:
                self._open_topic(result.open_topic_id)
            elif result.deleted_topic_id and result.deleted_topic_id == self.topic.id:
                self._replace_deleted_topic()
            elif result.renamed_topic_id and result.renamed_topic_id == self.topic.id:
                self.history.replace_present(
                    replace(self.present, topic=rename_topic(self.topic, result.title))
                )
        except Exception:
            log.exception("Topic switcher action failed")
        return KeyResult()

    def _navigate(self, query: str, reverse: bool) -> None:
        hit = find(self.topic, self.cursor_idx, self.deriv_idx, query, reverse)
        if hit is None:
            return
        self._set_focus(hit.cursor_idx, hit.deriv_idx)
        self.state.char_cursor = hit.offset

    # =========================================================================
    # Topics and persistence
    # =========================================================================

    def load_topic(self, topic: Topic) -> None:
        """Show another topic; history starts over."""
        self.history.reset(HistoryState(topic, 0, -1))
        self.state = EditorState(last_search=self.state.last_search)
        self._notify()

    def save(self) -> bool:
        if self.store is None or self.owner_id is None:
            return False
        try:
            self.store.save(self.owner_id, self.topic)
        except Exception:
            log.exception("Failed to save topic %s", self.topic.id)
            return False
        return True

    def _open_topic(self, topic_id: str) -> None:
        if topic_id == self.topic.id:
            return
        self.save()
        topic = self.store.load(self.owner_id, topic_id)
        if topic is None:
            log.warning("Topic %s not found", topic_id)
            return
        self.load_topic(topic)

    def _replace_deleted_topic(self) -> None:
        item = self.switcher.selected_item
        topic = self.store.load(self.owner_id, item.id) if item is not None else None
        if topic is None:
            topic = self.store.create(self.owner_id, "Untitled")
            self.switcher.refresh()
        self.load_topic(topic)

    # =========================================================================
    # AI generation
    # =========================================================================

    def begin_generation(self) -> Optional[GenerationRequest]:
        if self.generator is None:
            log.info("AI generation unavailable: no API key configured")
            return None
        if self.state.generating:
            return None
        concept = concept_at(self.topic, self.cursor_idx)
        if concept is None or not concept.text.strip():
            return None
        self.state.generating = True
        return GenerationRequest(concept.id, concept.text)

    async def run_generation(self, request: GenerationRequest) -> bool:
        try:
            raw = await self.generator.generate(request.text)
        except Exception:
            log.exception("AI generation failed for concept %s", request.concept_id)
            self.state.generating = False
            return False
        return self.finish_generation(request, raw)

    def finish_generation(self, request: GenerationRequest, raw: Any) -> bool:
        """Merge generated derivatives into the concept that asked for them."""
        self.state.generating = False
        derivatives = normalize_derivatives(raw)
        if not derivatives:
            log.warning("AI returned no usable derivatives for %s", request.concept_id)
            return False
        index = next(
            (i for i, c in enumerate(self.topic.concepts) if c.id == request.concept_id),
            -1,
        )
        if index == -1:
            log.warning("Dropping derivatives: concept %s no longer exists", request.concept_id)
            return False
        self._push(append_derivatives(self.topic, index, derivatives))
        return True

    async def generate(self) -> bool:
        request = self.begin_generation()
        if request is None:
            return False
        return await self.run_generation(request)

    def reset_ankify_status(self) -> None:
        self.state.ankify_status = "IDLE"


# =============================================================================
# BLOCK transitions
# =============================================================================


@transition(cmd.MoveFocus)
def _move_focus(engine: Engine, command: cmd.MoveFocus) -> None:
    c, d = engine.cursor_idx, engine.deriv_idx
    if d == -1:
        c = clamp(c + command.step, 0, len(engine.topic.concepts) - 1)
    else:
        concept = concept_at(engine.topic, c)
        count = len(concept.derivatives) if concept is not None else 0
        d = clamp(d + command.step, 0, max(0, count - 1))
    engine._set_focus(c, d)


@transition(cmd.FocusConcept)
def _focus_concept(engine: Engine, command: cmd.FocusConcept) -> None:
    engine._set_focus(engine.cursor_idx, -1)


@transition(cmd.FocusDerivatives)
def _focus_derivatives(engine: Engine, command: cmd.FocusDerivatives) -> None:
    if engine.deriv_idx == -1:
        engine._set_focus(engine.cursor_idx, 0)


@transition(cmd.EnterNormal)
def _enter_normal(engine: Engine, command: cmd.EnterNormal) -> None:
    if not engine.has_target:
        return
    engine._enter_mode("NORMAL")
    engine.state.char_cursor = len(engine.text) if command.at_end else 0


@transition(cmd.OpenConcept)
def _open_concept(engine: Engine, command: cmd.OpenConcept) -> None:
    if engine.deriv_idx != -1:
        if not command.above:
            engine.state.chord = "o"
        return
    index = engine.cursor_idx if command.above else engine.cursor_idx + 1
    engine._push(insert_concept(engine.topic, index, new_concept()), index, -1)
    engine._begin_insert(0, skip_commit=True)


@transition(cmd.StartChord)
def _start_chord(engine: Engine, command: cmd.StartChord) -> None:
    engine.state.chord = command.key


@transition(cmd.AppendDerivative)
def _append_derivative(engine: Engine, command: cmd.AppendDerivative) -> None:
    if concept_at(engine.topic, engine.cursor_idx) is None:
        return
    topic, index = insert_derivative(
        engine.topic, engine.cursor_idx, new_derivative(command.type)
    )
    engine._push(topic, engine.cursor_idx, index)
    engine._begin_insert(0, skip_commit=True)


@transition(cmd.DeleteFocused)
def _delete_focused(engine: Engine, command: cmd.DeleteFocused) -> None:
    if engine.deriv_idx == -1:
        topic, cursor_idx = remove_concept(engine.topic, engine.cursor_idx)
        engine._push(topic, cursor_idx, -1)
    elif focused_derivative(engine.topic, engine.cursor_idx, engine.deriv_idx) is not None:
        topic, deriv_idx = remove_derivative(engine.topic, engine.cursor_idx, engine.deriv_idx)
        engine._push(topic, engine.cursor_idx, deriv_idx)


def _typed_candidates(engine: Engine, action: str, command) -> None:
    concept = concept_at(engine.topic, engine.cursor_idx)
    if concept is None:
        return
    candidates = tuple(d for d in concept.derivatives if d.type == command.type)
    if not candidates:
        return
    if len(candidates) == 1:
        _resolve_candidate(engine, action, candidates[0])
        return
    engine.state.pending = CandidatePick(action, command.type, candidates[:MAX_CANDIDATES])


def _resolve_candidate(engine: Engine, action: str, derivative: Derivative) -> None:
    concept = concept_at(engine.topic, engine.cursor_idx)
    if concept is None:
        return
    index = next(
        (i for i, d in enumerate(concept.derivatives) if d.id == derivative.id), -1
    )
    if index == -1:
        return

    if action == "DELETE":
        topic = remove_derivative_by_id(engine.topic, engine.cursor_idx, derivative.id)
        deriv_idx = engine.deriv_idx
        if deriv_idx > index:
            deriv_idx -= 1
        elif deriv_idx == index:
            deriv_idx = max(-1, deriv_idx - 1)
        engine._push(topic, engine.cursor_idx, deriv_idx)
        return

    topic = replace_text(engine.topic, engine.cursor_idx, index, "")
    engine._push(topic, engine.cursor_idx, index)
    engine._begin_insert(0, skip_commit=True)


@transition(cmd.DeleteTyped)
def _delete_typed(engine: Engine, command: cmd.DeleteTyped) -> None:
    _typed_candidates(engine, "DELETE", command)


@transition(cmd.ChangeTyped)
def _change_typed(engine: Engine, command: cmd.ChangeTyped) -> None:
    _typed_candidates(engine, "CHANGE", command)


@transition(cmd.PickCandidate)
def _pick_candidate(engine: Engine, command: cmd.PickCandidate) -> None:
    pick = engine.state.pending
    engine.state.pending = None
    if pick is None or not 1 <= command.number <= len(pick.candidates):
        return
    _resolve_candidate(engine, pick.action, pick.candidates[command.number - 1])


@transition(cmd.ChangeFocused)
def _change_focused(engine: Engine, command: cmd.ChangeFocused) -> None:
    if not engine.has_target:
        return
    engine._push(replace_text(engine.topic, engine.cursor_idx, engine.deriv_idx, ""))
    engine._begin_insert(0, skip_commit=True)


# =============================================================================
# NORMAL transitions
# =============================================================================


@transition(cmd.MoveCursor)
def _move_cursor(engine: Engine, command: cmd.MoveCursor) -> None:
    text = engine.text
    cur = clamp(engine.state.char_cursor, 0, len(text))
    motion = command.motion
    if motion == "h":
        cur = max(0, cur - 1)
    elif motion == "l":
        cur = min(cur + 1, max(0, len(text) - 1))
    elif motion == "0":
        cur = line_start(text, cur)
    elif motion == "$":
        cur = line_last_char(text, cur)
    elif motion == "w":
        cur = next_word_start(text, cur)
    elif motion == "b":
        cur = prev_word_start(text, cur)
    elif motion == "e":
        cur = word_end(text, cur)
    elif motion == "j":
        cur = move_line(text, cur, 1)
    elif motion == "k":
        cur = move_line(text, cur, -1)
    engine.state.char_cursor = cur


@transition(cmd.EnterInsert)
def _enter_insert(engine: Engine, command: cmd.EnterInsert) -> None:
    if not engine.has_target:
        return
    text = engine.text
    cur = clamp(engine.state.char_cursor, 0, len(text))
    where = command.where
    if where == "i":
        engine._begin_insert(cur)
    elif where == "I":
        engine._begin_insert(line_start(text, cur))
    elif where == "a":
        engine._begin_insert(min(cur + 1, len(text)))
    elif where == "A":
        engine._begin_insert(line_end(text, cur))
    elif where == "o":
        end = line_end(text, cur)
        engine._begin_insert(end)
        engine._edit(text[:end] + "\n" + text[end:], end + 1)
    elif where == "O":
        start = line_start(text, cur)
        engine._begin_insert(start)
        engine._edit(text[:start] + "\n" + text[start:], start)


@transition(cmd.DeleteChar)
def _delete_char(engine: Engine, command: cmd.DeleteChar) -> None:
    text = engine.text
    cur = engine.state.char_cursor
    if not engine.has_target or cur >= len(text):
        return
    new_text = text[:cur] + text[cur + 1 :]
    engine._push(replace_text(engine.topic, engine.cursor_idx, engine.deriv_idx, new_text))
    engine.state.char_cursor = min(cur, len(new_text))


@transition(cmd.StartOperator)
def _start_operator(engine: Engine, command: cmd.StartOperator) -> None:
    if engine.has_target:
        engine.state.operator = command.operator


@transition(cmd.ApplyOperator)
def _apply_operator(engine: Engine, command: cmd.ApplyOperator) -> None:
    if not engine.has_target:
        return
    text = engine.text
    cur = clamp(engine.state.char_cursor, 0, len(text))
    if command.operator == "d" and command.motion == "line":
        start, end = line_delete_range(text, cur)
    else:
        start, end = operator_range(text, cur, command.motion)

    if command.operator == "y":
        if end > start:
            engine.clipboard.set_text(text[start:end])
        return

    if end <= start:
        if command.operator == "c":
            engine._begin_insert(start)
        return

    new_text = text[:start] + text[end:]
    engine._push(replace_text(engine.topic, engine.cursor_idx, engine.deriv_idx, new_text))
    if command.operator == "c":
        engine._begin_insert(start, skip_commit=True)
    else:
        engine.state.char_cursor = min(start, len(new_text))


# =============================================================================
# Shared transitions
# =============================================================================


@transition(cmd.ToggleVisual)
def _toggle_visual(engine: Engine, command: cmd.ToggleVisual) -> None:
    if command.kind == "block":
        if engine.state.block_anchor is not None:
            engine.state.visual = None
        else:
            engine.state.visual = BlockAnchor(engine.cursor_idx, engine.deriv_idx)
        return
    if not engine.has_target:
        return
    if engine.state.text_anchor is not None:
        engine.state.visual = None
    else:
        engine.state.visual = TextAnchor(
            engine.cursor_idx, engine.deriv_idx, engine.state.char_cursor
        )


@transition(cmd.Yank)
def _yank(engine: Engine, command: cmd.Yank) -> None:
    if engine.state.mode == "NORMAL":
        anchor = engine._live_text_anchor()
        if anchor is not None:
            engine.clipboard.set_text(
                text_selection(anchor, engine.state.char_cursor, engine.text)
            )
            engine.state.visual = None
        elif engine.has_target:
            engine.state.operator = "y"
        return

    anchor = engine.state.block_anchor
    if anchor is not None:
        refs = block_range(engine.topic, anchor, engine.cursor_idx, engine.deriv_idx)
        engine.state.visual = None
    else:
        index = flat_index(engine.topic, engine.cursor_idx, engine.deriv_idx)
        refs = [flatten(engine.topic)[index]] if index != -1 else []
    if refs:
        engine.clipboard.set_blocks(yank_refs(refs))


@transition(cmd.Paste)
def _paste(engine: Engine, command: cmd.Paste) -> None:
    clip = engine.clipboard
    if engine.state.mode == "NORMAL" and clip.text:
        if not engine.has_target:
            return
        new_text, cursor = paste_text(engine.text, engine.state.char_cursor, clip.text)
        engine._push(
            replace_text(engine.topic, engine.cursor_idx, engine.deriv_idx, new_text)
        )
        engine.state.char_cursor = cursor
    elif clip.blocks:
        topic, cursor_idx, deriv_idx = paste_blocks(
            engine.topic, engine.cursor_idx, engine.deriv_idx, clip.blocks
        )
        engine._push(topic, cursor_idx, deriv_idx)


@transition(cmd.OpenSearch)
def _open_search(engine: Engine, command: cmd.OpenSearch) -> None:
    engine.state.search = ""


@transition(cmd.RepeatSearch)
def _repeat_search(engine: Engine, command: cmd.RepeatSearch) -> None:
    if engine.state.last_search:
        engine._navigate(engine.state.last_search, command.reverse)


@transition(cmd.Generate)
def _generate(engine: Engine, command: cmd.Generate) -> None:
    if command.concept_focus_only and engine.deriv_idx != -1:
        return
    request = engine.begin_generation()
    if request is None:
        return
    if engine.scheduler is None:
        log.warning("No scheduler attached; generation skipped")
        engine.state.generating = False
        return
    engine.scheduler(engine.run_generation(request))


@transition(cmd.Ankify)
def _ankify(engine: Engine, command: cmd.Ankify) -> None:
    try:
        cards = engine.ankify(engine.topic)
    except Exception:
        log.exception("Ankify failed for topic %s", engine.topic.id)
        return
    log.info("Ankify: %d cards from topic %s", len(cards or []), engine.topic.id)
    engine.state.ankify_status = "SUCCESS"


@transition(cmd.OpenSwitcher)
def _open_switcher(engine: Engine, command: cmd.OpenSwitcher) -> None:
    if engine.switcher is None:
        log.info("Topic switcher unavailable: no store attached")
        return
    engine.save()
    try:
        engine.switcher.open(engine.topic.id)
    except Exception:
        log.exception("Failed to list topics")


@transition(cmd.Undo)
def _undo(engine: Engine, command: cmd.Undo) -> None:
    if engine.history.undo() is not None:
        engine._after_jump()


@transition(cmd.Redo)
def _redo(engine: Engine, command: cmd.Redo) -> None:
    if engine.history.redo() is not None:
        engine._after_jump()


@transition(cmd.Escape)
def _escape(engine: Engine, command: cmd.Escape) -> None:
    state = engine.state
    state.pending = None
    if state.visual is not None:
        state.visual = None
        return
    if state.mode == "NORMAL":
        engine._enter_mode("BLOCK")


@transition(cmd.CancelPending)
def _cancel_pending(engine: Engine, command: cmd.CancelPending) -> None:
    engine.state.chord = ""
    engine.state.operator = ""
    engine.state.pending = None
