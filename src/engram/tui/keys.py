"""Textual key events -> engine key names."""

from __future__ import annotations

from typing import Optional


def engine_key(key: str, character: Optional[str]) -> str:
    """Printable characters pass through; everything else keeps Textual's key name.

    "space" becomes " " (the leader), so "escape", "enter", "backspace",
    "delete", "left" and "right" are the only names the engine binds.
    """
    if key == "space":
        return " "
    if character is not None and len(character) == 1 and character.isprintable():
        return character
    return key
