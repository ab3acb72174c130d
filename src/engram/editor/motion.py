"""Cursor motions over a single text field.

Pure functions of (text, index). A "word char" is alphanumeric or "_".
"""

from __future__ import annotations

from typing import Literal

Motion = Literal["w", "e", "b", "line"]


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def is_word_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def next_word_start(text: str, idx: int) -> int:
    """Skip the rest of the current word, then the separators after it."""
    n = len(text)
    if idx >= n:
        return n
    i = max(0, idx)
    if is_word_char(text[i]):
        while i < n and is_word_char(text[i]):
            i += 1
    while i < n and not is_word_char(text[i]):
        i += 1
    return i


def prev_word_start(text: str, idx: int) -> int:
    if idx <= 0:
        return 0
    i = min(idx, len(text)) - 1
    while i > 0 and not is_word_char(text[i]):
        i -= 1
    while i > 0 and is_word_char(text[i - 1]):
        i -= 1
    return i


def word_end(text: str, idx: int) -> int:
    """Index of the last char of the current (or next) word, inclusive."""
    n = len(text)
    if not n:
        return 0
    i = clamp(idx, 0, n - 1)
    at_end_of_word = is_word_char(text[i]) and (i == n - 1 or not is_word_char(text[i + 1]))
    if not is_word_char(text[i]) or at_end_of_word:
        i += 1
        while i < n and not is_word_char(text[i]):
            i += 1
        if i >= n:
            return n - 1
    while i < n - 1 and is_word_char(text[i + 1]):
        i += 1
    return i


def line_start(text: str, idx: int) -> int:
    return text.rfind("\n", 0, clamp(idx, 0, len(text))) + 1


def line_end(text: str, idx: int) -> int:
    found = text.find("\n", clamp(idx, 0, len(text)))
    return len(text) if found == -1 else found


def move_line(text: str, idx: int, direction: int) -> int:
    """Move to the adjacent line keeping the column (clamped to that line)."""
    if "\n" not in text:
        return idx
    start = line_start(text, idx)
    column = idx - start

    if direction > 0:
        end = line_end(text, idx)
        if end >= len(text):
            return idx
        next_start = end + 1
        next_end = line_end(text, next_start)
        return next_start + min(column, next_end - next_start)

    if start == 0:
        return idx
    prev_end = start - 1
    prev_start = line_start(text, prev_end)
    return prev_start + min(column, prev_end - prev_start)


def line_last_char(text: str, idx: int) -> int:
    """Target of `$`: last character on the current line."""
    start = line_start(text, idx)
    end = line_end(text, idx)
    return max(start, end - 1)


def operator_range(text: str, cursor: int, motion: Motion) -> tuple[int, int]:
    """Half-open [start, end) covered by an operator + motion."""
    cursor = clamp(cursor, 0, len(text))
    if motion == "w":
        return cursor, next_word_start(text, cursor)
    if motion == "e":
        if cursor >= len(text):
            return cursor, cursor
        return cursor, min(len(text), word_end(text, cursor) + 1)
    if motion == "b":
        return prev_word_start(text, cursor), cursor
    return line_start(text, cursor), line_end(text, cursor)


def line_delete_range(text: str, cursor: int) -> tuple[int, int]:
    """Current line plus one adjacent newline, so `dd` removes the line."""
    start = line_start(text, cursor)
    end = line_end(text, cursor)
    if end < len(text):
        return start, end + 1
    if start > 0:
        return start - 1, end
    return start, end
