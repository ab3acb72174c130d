"""The topic document: concepts, their derivatives and the mode line."""

from __future__ import annotations

from typing import Optional

from rich.text import Text
from textual.containers import Vertical
from textual.widgets import Static

from engram.editor.engine import Engine
from engram.editor.model import DerivativeType
from engram.editor.search import match_ranges
from engram.tui.views.base import View
from engram.tui.views.hints import hints_for

TYPE_LABELS = {
    DerivativeType.PROBING: "PROBE",
    DerivativeType.CLOZE: "CLOZE",
    DerivativeType.ELABORATION: "ELAB ",
}

MATCH_STYLE = "black on yellow"
SELECTION_STYLE = "reverse"
CURSOR_STYLE = "reverse bold"


def render_field(
    text: str,
    *,
    placeholder: str = "",
    cursor: Optional[int] = None,
    selection: Optional[tuple[int, int]] = None,
    query: str = "",
) -> Text:
    """One text field with search matches, selection and cursor applied in that order."""
    if not text:
        out = Text(placeholder, style="dim")
        if cursor is not None:
            out = Text(" ", style=CURSOR_STYLE) + out
        return out

    out = Text(text)
    for start, end in match_ranges(text, query):
        out.stylize(MATCH_STYLE, start, end)
    if selection is not None:
        out.stylize(SELECTION_STYLE, selection[0], selection[1] + 1)
    if cursor is not None:
        if cursor >= len(text):
            out.append(" ", style=CURSOR_STYLE)
        else:
            out.stylize(CURSOR_STYLE, cursor, cursor + 1)
    return out


class TopicView(View):
    name = "topic"

    def _field(self, engine: Engine, c_idx: int, d_idx: int, text: str, placeholder: str) -> Text:
        focused = (c_idx, d_idx) == (engine.cursor_idx, engine.deriv_idx)
        editing = focused and engine.mode in ("NORMAL", "INSERT")
        return render_field(
            text,
            placeholder=placeholder,
            cursor=engine.state.char_cursor if editing else None,
            selection=engine.text_selection_range() if focused else None,
            query=engine.state.search or engine.state.last_search,
        )

    def _line(self, engine: Engine, c_idx: int, d_idx: int, prefix: str, body: Text) -> Static:
        focused = (c_idx, d_idx) == (engine.cursor_idx, engine.deriv_idx)
        classes = "block"
        if focused:
            classes += " focused"
        if engine.is_block_selected(c_idx, d_idx):
            classes += " selected"
        marker = "▌" if focused else " "
        return Static(Text(f"{marker}{prefix}") + body, classes=classes)

    def _mode_line(self, engine: Engine) -> Text:
        line = Text(f" {engine.mode_label} ", style="bold reverse")
        if engine.settings.show_key_buffer and engine.state.key_buffer:
            line.append(f"  {engine.state.key_buffer}", style="bold")
        if engine.state.generating:
            line.append("  generating…", style="italic")
        if engine.state.ankify_status == "SUCCESS":
            line.append("  ✓ ankified", style="green")
        return line

    def render(self, engine: Engine):
        topic = engine.topic
        widgets = [Static(Text(topic.title or "Untitled", style="bold underline"), id="title")]

        for c_idx, concept in enumerate(topic.concepts):
            widgets.append(
                self._line(
                    engine,
                    c_idx,
                    -1,
                    f"{c_idx + 1:>2}. ",
                    self._field(engine, c_idx, -1, concept.text, "Empty concept"),
                )
            )
            for d_idx, derivative in enumerate(concept.derivatives):
                widgets.append(
                    self._line(
                        engine,
                        c_idx,
                        d_idx,
                        f"      {TYPE_LABELS[derivative.type]} ",
                        self._field(engine, c_idx, d_idx, derivative.text, "Empty derivative"),
                    )
                )
            if (
                not concept.derivatives
                and c_idx == engine.cursor_idx
                and engine.deriv_idx == 0
            ):
                widgets.append(
                    self._line(
                        engine, c_idx, 0, "      ", Text("o + p/c/e to add a derivative", style="dim")
                    )
                )

        pick = engine.state.pending
        if pick is not None:
            lines = [f"{pick.action.lower()} which {pick.type.value.lower()}?"]
            lines += [f"  {i}. {d.text or '(empty)'}" for i, d in enumerate(pick.candidates, 1)]
            widgets.append(Static(Text("\n".join(lines)), id="pick"))

        if engine.state.search is not None:
            widgets.append(Static(Text(f"/{engine.state.search}"), id="search"))

        return [
            Vertical(*widgets, id="document"),
            Static(self._mode_line(engine), id="mode-line"),
            Static(hints_for(engine), id="hint-bar"),
        ]
