"""Tests for cyclic case-insensitive search."""

from engram.editor.search import find, match_ranges


class TestFind:
    def test_finds_next_field_with_offset(self, make_topic):
        topic = make_topic("no match", "a cloze term")
        hit = find(topic, 0, -1, "cloze")
        assert (hit.cursor_idx, hit.deriv_idx, hit.offset) == (1, -1, 2)

    def test_case_insensitive(self, make_topic):
        topic = make_topic("x", "Entropy")
        assert find(topic, 0, -1, "ENTROPY").cursor_idx == 1

    def test_wraps_and_checks_focus_last(self, make_topic):
        topic = make_topic("needle", "other", "needle too")
        hit = find(topic, 2, -1, "needle")
        assert hit.cursor_idx == 0

        only_self = make_topic("needle", "other")
        assert find(only_self, 0, -1, "needle").cursor_idx == 0

    def test_reverse(self, make_topic):
        topic = make_topic("needle", "other", "needle too")
        assert find(topic, 1, -1, "needle", reverse=True).cursor_idx == 0

    def test_searches_derivatives(self, make_topic):
        topic = make_topic(("a", [("PROBING", "why gravity?")]), "b")
        hit = find(topic, 1, -1, "gravity")
        assert (hit.cursor_idx, hit.deriv_idx) == (0, 0)

    def test_no_match_and_empty_query(self, make_topic):
        topic = make_topic("abc")
        assert find(topic, 0, -1, "zzz") is None
        assert find(topic, 0, -1, "") is None


def test_match_ranges():
    assert match_ranges("Abc abc", "abc") == [(0, 3), (4, 7)]
