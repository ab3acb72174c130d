"""Tests for word and line motions."""

from engram.editor.motion import (
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


class TestWordMotions:
    def test_literal_rules(self):
        assert next_word_start("abc def", 0) == 4
        assert prev_word_start("abc def", 4) == 0
        assert word_end("abc def", 0) == 2

    def test_next_word_start_stops_at_end(self):
        assert next_word_start("abc", 1) == 3
        assert next_word_start("abc", 3) == 3

    def test_word_end_from_end_of_word_moves_to_next(self):
        assert word_end("abc def", 2) == 6

    def test_prev_word_start_from_middle(self):
        assert prev_word_start("abc def", 5) == 4

    def test_underscore_is_a_word_char(self):
        assert next_word_start("snake_case word", 0) == 11

    def test_word_end_on_empty_text(self):
        assert word_end("", 0) == 0

    def test_word_end_on_last_word_stays_on_last_char(self):
        assert word_end("abc", 2) == 2
        assert word_end("abc def", 6) == 6

    def test_indexes_past_the_end(self):
        assert prev_word_start("ab", 10) == 0
        assert next_word_start("ab", 10) == 2


class TestLines:
    TEXT = "one\ntwo three\nx"

    def test_line_bounds(self):
        assert line_start(self.TEXT, 6) == 4
        assert line_end(self.TEXT, 6) == 13

    def test_move_line_keeps_column(self):
        assert move_line(self.TEXT, 1, 1) == 5
        assert move_line(self.TEXT, 5, -1) == 1

    def test_move_line_clamps_to_shorter_line(self):
        assert move_line(self.TEXT, 12, 1) == 15

    def test_move_line_without_newlines(self):
        assert move_line("abc", 2, 1) == 2

    def test_dollar_targets_last_char(self):
        assert line_last_char(self.TEXT, 0) == 2

    def test_move_line_past_first_or_last_line_is_noop(self):
        assert move_line("one\ntwo", 1, -1) == 1
        assert move_line("one\ntwo", 5, 1) == 5


class TestOperatorRanges:
    def test_dw_range(self):
        assert operator_range("Entropy measures disorder", 0, "w") == (0, 8)

    def test_de_range_includes_last_char(self):
        assert operator_range("abc def", 0, "e") == (0, 3)

    def test_db_range(self):
        assert operator_range("abc def", 4, "b") == (0, 4)

    def test_dd_takes_trailing_newline(self):
        assert line_delete_range("one\ntwo", 1) == (0, 4)

    def test_dd_on_last_line_takes_leading_newline(self):
        assert line_delete_range("one\ntwo", 5) == (3, 7)


SAMPLES = ["", "a", "abc def", "one\ntwo three\nx", "  __x!! y\n\n"]


def test_motions_stay_inside_the_text():
    for text in SAMPLES:
        for idx in range(len(text) + 1):
            results = [
                next_word_start(text, idx),
                prev_word_start(text, idx),
                word_end(text, idx),
                line_start(text, idx),
                line_end(text, idx),
                line_last_char(text, idx),
                move_line(text, idx, 1),
                move_line(text, idx, -1),
            ]
            assert all(0 <= r <= len(text) for r in results), (text, idx, results)
