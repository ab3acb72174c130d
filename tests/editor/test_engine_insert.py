"""INSERT mode: typing, sessions and the host text hook."""


class TestTyping:
    def test_insert_session_is_one_undo_step(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "i", "i", "XYZ", "escape")
        assert engine.text == "XYZabc"
        assert len(engine.history) == 1

        keys(engine, "u")
        assert engine.text == "abc"
        keys(engine, "r")
        assert engine.text == "XYZabc"

    def test_escape_moves_cursor_back(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "i", "i", "X", "escape")
        assert engine.mode == "NORMAL"
        assert engine.state.char_cursor == 0

        keys(engine, "i", "escape")
        assert engine.state.char_cursor == 0

    def test_session_without_changes_records_nothing(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "i", "i", "escape")
        assert not engine.history.can_undo()

    def test_editing_keys(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "a", "i")
        keys(engine, "backspace")
        assert engine.text == "ab"
        keys(engine, "left", "left", "delete")
        assert engine.text == "b"
        keys(engine, "right", "enter", "z")
        assert engine.text == "b\nz"

    def test_space_types_in_insert(self, make_engine, keys):
        engine = make_engine("ab")
        keys(engine, "a", "i", " ")
        assert engine.text == "ab "
        assert engine.state.chord == ""

    def test_unbound_named_key_is_not_consumed(self, make_engine):
        engine = make_engine("ab")
        engine.handle_key("i")
        engine.handle_key("i")
        assert engine.handle_key("tab").consumed is False

    def test_listeners_follow_typing(self, make_engine, keys):
        engine = make_engine("")
        seen = []
        engine.subscribe(lambda present: seen.append(present.topic.concepts[0].text))
        keys(engine, "i", "i", "hi")
        assert seen == ["h", "hi"]


class TestSetText:
    def test_set_text_behaves_like_typing(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "i", "i")
        engine.set_text("hello", 5)
        assert engine.text == "hello"
        assert engine.state.char_cursor == 5

        keys(engine, "escape", "u")
        assert engine.text == "abc"

    def test_set_text_outside_insert_is_ignored(self, make_engine):
        engine = make_engine("abc")
        engine.set_text("nope")
        assert engine.text == "abc"


class TestModeIndependence:
    def test_undo_only_in_block_and_normal(self, make_engine, keys):
        """In INSERT, u and r are text."""
        engine = make_engine("")
        keys(engine, "i", "i", "ur", "escape")
        assert engine.text == "ur"

    def test_leader_in_normal(self, make_engine, keys):
        engine = make_engine("a")
        keys(engine, "i", " ")
        assert engine.state.chord == " "
        assert engine.state.key_buffer == "<space>"
        keys(engine, "q")
        assert engine.state.chord == ""
