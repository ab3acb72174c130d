"""Tests for the topic/concept/derivative value operations."""

from engram.editor.model import (
    DerivativeType,
    empty_topic,
    flat_index,
    flatten,
    focused_text,
    has_focus_target,
    insert_derivative,
    new_derivative,
    remove_concept,
    remove_derivative,
    replace_text,
    sort_derivatives,
    clone_concept,
    topic_from_dict,
    topic_to_dict,
)

PROBING = DerivativeType.PROBING
CLOZE = DerivativeType.CLOZE
ELABORATION = DerivativeType.ELABORATION


class TestOrdering:
    def test_probing_sorts_before_existing_cloze(self, make_topic):
        """A new PROBING lands first; the returned index follows the sort."""
        topic = make_topic(("c", [("CLOZE", "cloze")]))
        topic, idx = insert_derivative(topic, 0, new_derivative(PROBING, "why?"))

        types = [d.type for d in topic.concepts[0].derivatives]
        assert types == [PROBING, CLOZE]
        assert idx == 0

    def test_sort_is_stable_within_a_type(self):
        a = new_derivative(CLOZE, "a")
        b = new_derivative(ELABORATION, "b")
        c = new_derivative(CLOZE, "c")
        ordered = sort_derivatives([b, a, c])
        assert [d.text for d in ordered] == ["a", "c", "b"]


class TestRemoval:
    def test_removing_only_concept_leaves_an_empty_one(self, make_topic):
        topic = make_topic("only")
        topic, cursor = remove_concept(topic, 0)

        assert len(topic.concepts) == 1
        assert topic.concepts[0].text == ""
        assert cursor == 0

    def test_removing_last_concept_clamps_cursor(self, make_topic):
        topic = make_topic("a", "b", "c")
        topic, cursor = remove_concept(topic, 2)
        assert [c.text for c in topic.concepts] == ["a", "b"]
        assert cursor == 1

    def test_removing_first_derivative_focuses_concept(self, make_topic):
        topic = make_topic(("c", [("PROBING", "p")]))
        topic, deriv_idx = remove_derivative(topic, 0, 0)
        assert topic.concepts[0].derivatives == ()
        assert deriv_idx == -1


class TestFocus:
    def test_empty_derivative_slot_has_no_target(self, make_topic):
        topic = make_topic("concept")
        assert has_focus_target(topic, 0, -1)
        assert not has_focus_target(topic, 0, 0)
        assert focused_text(topic, 0, 0) == ""

    def test_replace_text_on_derivative(self, make_topic):
        topic = make_topic(("c", [("CLOZE", "old")]))
        topic = replace_text(topic, 0, 0, "new")
        assert topic.concepts[0].derivatives[0].text == "new"
        assert topic.concepts[0].text == "c"

    def test_flatten_order(self, make_topic):
        topic = make_topic(("a", [("PROBING", "p"), ("CLOZE", "c")]), "b")
        refs = [(r.cursor_idx, r.deriv_idx, r.text) for r in flatten(topic)]
        assert refs == [(0, -1, "a"), (0, 0, "p"), (0, 1, "c"), (1, -1, "b")]
        assert flat_index(topic, 1, -1) == 3
        assert flat_index(topic, 1, 0) == -1


class TestIdentity:
    def test_clone_mints_fresh_ids(self, make_topic):
        concept = make_topic(("a", [("CLOZE", "c")])).concepts[0]
        clone = clone_concept(concept)
        assert clone.id != concept.id
        assert clone.derivatives[0].id != concept.derivatives[0].id
        assert clone.derivatives[0].text == "c"

    def test_empty_topic_has_one_concept(self):
        topic = empty_topic("Fresh")
        assert topic.title == "Fresh"
        assert len(topic.concepts) == 1


class TestSerialization:
    def test_dict_keeps_structure(self, make_topic):
        topic = make_topic(("a", [("PROBING", "p")]), "b")
        restored = topic_from_dict(topic_to_dict(topic))
        assert restored == topic

    def test_lenient_loading(self):
        """Unknown types fall back to CLOZE and derivatives come back sorted."""
        topic = topic_from_dict(
            {
                "title": "T",
                "concepts": [
                    {
                        "text": "x",
                        "derivatives": [
                            {"type": "mystery", "text": "m"},
                            {"type": "probing", "text": "q"},
                        ],
                    }
                ],
            }
        )
        derivatives = topic.concepts[0].derivatives
        assert [d.type for d in derivatives] == [PROBING, CLOZE]
        assert all(d.id for d in derivatives)

    def test_empty_payload_gets_a_concept(self):
        topic = topic_from_dict({})
        assert topic.title == "Untitled"
        assert len(topic.concepts) == 1
