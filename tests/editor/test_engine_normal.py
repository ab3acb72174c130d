"""NORMAL mode: character motions, operators and text yank/paste."""


def text_of(engine):
    return engine.text


class TestMotions:
    def test_word_motions(self, make_engine, keys):
        engine = make_engine("abc def ghi")
        keys(engine, "i", "w")
        assert engine.state.char_cursor == 4
        keys(engine, "e")
        assert engine.state.char_cursor == 6
        keys(engine, "b")
        assert engine.state.char_cursor == 4

    def test_line_motions(self, make_engine, keys):
        engine = make_engine("abc\ndefgh")
        keys(engine, "i", "$")
        assert engine.state.char_cursor == 2
        keys(engine, "j")
        assert engine.state.char_cursor == 6
        keys(engine, "$")
        assert engine.state.char_cursor == 8
        keys(engine, "0")
        assert engine.state.char_cursor == 4
        keys(engine, "k")
        assert engine.state.char_cursor == 0

    def test_h_and_l_clamp(self, make_engine, keys):
        engine = make_engine("ab")
        keys(engine, "i", "hh")
        assert engine.state.char_cursor == 0
        keys(engine, "lll")
        assert engine.state.char_cursor == 1


class TestOperators:
    def test_dw_deletes_first_word(self, make_engine, keys):
        engine = make_engine("Entropy measures disorder")
        keys(engine, "i", "dw")
        assert text_of(engine) == "measures disorder"
        assert engine.state.char_cursor == 0

        keys(engine, "u")
        assert text_of(engine) == "Entropy measures disorder"

    def test_de_and_db(self, make_engine, keys):
        engine = make_engine("abc def")
        keys(engine, "i", "de")
        assert text_of(engine) == " def"

        engine = make_engine("abc def")
        keys(engine, "i", "w", "db")
        assert text_of(engine) == "def"
        assert engine.state.char_cursor == 0

    def test_dd_removes_line(self, make_engine, keys):
        engine = make_engine("one\ntwo\nthree")
        keys(engine, "i", "j", "dd")
        assert text_of(engine) == "one\nthree"

    def test_cw_is_one_undo_step(self, make_engine, keys):
        engine = make_engine("abc def")
        keys(engine, "i", "cw")
        assert engine.mode == "INSERT"
        assert text_of(engine) == "def"

        keys(engine, "X ", "escape")
        assert text_of(engine) == "X def"

        keys(engine, "u")
        assert text_of(engine) == "abc def"

    def test_cc_clears_the_line(self, make_engine, keys):
        engine = make_engine("one\ntwo")
        keys(engine, "i", "j", "cc")
        assert text_of(engine) == "one\n"
        assert engine.state.char_cursor == 4
        assert engine.mode == "INSERT"

    def test_unknown_motion_cancels_operator(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "i", "dz")
        assert engine.state.operator == ""
        assert text_of(engine) == "abc"
        keys(engine, "w")
        assert engine.state.char_cursor == 3

    def test_escape_cancels_operator_without_leaving_normal(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "i", "d", "escape")
        assert engine.mode == "NORMAL"
        assert engine.state.operator == ""


class TestDeleteChar:
    def test_x(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "i", "x")
        assert text_of(engine) == "bc"
        assert engine.state.char_cursor == 0

    def test_x_at_end_is_noop(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "a", "x")
        assert text_of(engine) == "abc"
        assert not engine.history.can_undo()

    def test_x_on_last_char_clamps_cursor(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "i", "$", "x")
        assert text_of(engine) == "ab"
        assert engine.state.char_cursor == 2


class TestYankPaste:
    def test_yw_then_paste(self, make_engine, keys):
        engine = make_engine("abc def")
        keys(engine, "i", "w", "yw")
        assert engine.clipboard.text == "def"
        assert engine.state.char_cursor == 4

        keys(engine, "p")
        assert text_of(engine) == "abc defdef"

    def test_yy_then_paste(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "i", "yy", "p")
        assert text_of(engine) == "abcabc"

    def test_visual_yank(self, make_engine, keys):
        engine = make_engine("abcdef")
        keys(engine, "i", "l", "v", "ll")
        assert engine.mode_label == "VISUAL"
        assert engine.text_selection_range() == (1, 3)

        keys(engine, "y")
        assert engine.clipboard.text == "bcd"
        assert engine.state.visual is None
        assert engine.mode == "NORMAL"

    def test_text_visual_cleared_when_focus_changes(self, make_engine, keys):
        engine = make_engine("abc", "xyz")
        keys(engine, "i", "v", "/xyz", "enter")
        assert engine.cursor_idx == 1
        assert engine.state.visual is None

    def test_escape_clears_visual_then_leaves_normal(self, make_engine, keys):
        engine = make_engine("abc")
        keys(engine, "i", "v", "escape")
        assert engine.mode == "NORMAL"
        assert engine.state.visual is None
        keys(engine, "escape")
        assert engine.mode == "BLOCK"

    def test_paste_blocks_from_normal(self, make_engine, keys):
        engine = make_engine("a", "b")
        keys(engine, "y", "i", "p")
        assert [c.text for c in engine.topic.concepts] == ["a", "a", "b"]


class TestInsertEntry:
    def test_A_appends(self, make_engine, keys):
        engine = make_engine("ab")
        keys(engine, "i", "A", "c", "escape")
        assert text_of(engine) == "abc"
        assert engine.state.char_cursor == 2

    def test_I_inserts_at_line_start(self, make_engine, keys):
        engine = make_engine("one\ntwo")
        keys(engine, "i", "j", "$", "I", ">", "escape")
        assert text_of(engine) == "one\n>two"

    def test_a_inserts_after_cursor(self, make_engine, keys):
        engine = make_engine("ac")
        keys(engine, "i", "a", "b", "escape")
        assert text_of(engine) == "abc"

    def test_o_opens_line_below_in_one_step(self, make_engine, keys):
        engine = make_engine("ab")
        keys(engine, "i", "o", "x", "escape")
        assert text_of(engine) == "ab\nx"
        keys(engine, "u")
        assert text_of(engine) == "ab"

    def test_O_opens_line_above(self, make_engine, keys):
        engine = make_engine("ab")
        keys(engine, "i", "O", "x", "escape")
        assert text_of(engine) == "x\nab"
