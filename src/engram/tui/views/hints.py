"""Contextual key hints for the hint bar."""

from __future__ import annotations

from engram.editor.engine import Engine

CHORD_HINTS = {
    " ": "g:generate  f:ankify  a:topics",
    "d": "d:focused  p:probing  c:cloze  e:elaboration  Esc:cancel",
    "c": "c:focused  p:probing  l:cloze  e:elaboration  Esc:cancel",
    "o": "p:probing  c:cloze  e:elaboration  Esc:cancel",
}


def hints_for(engine: Engine) -> str:
    state = engine.state
    redo = engine.settings.redo_key

    switcher = engine.switcher
    if switcher is not None and switcher.is_open:
        if switcher.renaming:
            return "type a title  Enter/Esc:done"
        return "j/k:move  o:new  c:rename  d:delete  Enter:open  Esc:close"
    if state.search is not None:
        return "type to search  Enter:find  Esc:cancel"
    if state.pending is not None:
        return f"1-{len(state.pending.candidates)}:pick  Esc:cancel"
    if state.chord:
        return CHORD_HINTS.get(state.chord, "")
    if state.operator:
        return "w/e/b:motion  " + f"{state.operator}:line  Esc:cancel"

    if state.mode == "INSERT":
        return "type to edit  Esc:normal"
    if state.mode == "NORMAL":
        return (
            "h/l/w/b/e/0/$:move  i/a/o:insert  x:delete  d/c/y:operator  "
            f"v:visual  p:paste  u/{redo}:undo/redo  Esc:block"
        )
    return (
        "j/k:move  h/l:concept/derivs  i/a:edit  o:new  d/c:delete/change  "
        f"v:visual  y/p:yank/paste  /:search  u/{redo}:undo/redo  Space:more"
    )
