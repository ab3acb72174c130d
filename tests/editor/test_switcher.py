"""Topic switcher overlay against a Mock store."""

from unittest.mock import Mock

from engram.db.store import TopicSummary
from engram.editor.model import empty_topic
from engram.editor.switcher import TopicSwitcher


def _store(*titles):
    store = Mock()
    store.list_topics.return_value = [TopicSummary(id=f"t{i}", title=t) for i, t in enumerate(titles)]
    return store


class TestTopicSwitcher:
    def test_open_selects_current_topic(self):
        switcher = TopicSwitcher(_store("a", "b", "c"), "owner")
        switcher.open("t1")
        assert switcher.is_open
        assert switcher.selected == 1

    def test_j_k_clamp(self):
        switcher = TopicSwitcher(_store("a", "b"), "owner")
        switcher.open()
        for key in "jjj":
            switcher.handle_key(key)
        assert switcher.selected == 1
        for key in "kkk":
            switcher.handle_key(key)
        assert switcher.selected == 0

    def test_enter_reports_topic_and_closes(self):
        switcher = TopicSwitcher(_store("a", "b"), "owner")
        switcher.open()
        switcher.handle_key("j")
        result = switcher.handle_key("l")
        assert result.open_topic_id == "t1"
        assert not switcher.is_open

    def test_rename_flow(self):
        store = _store("old")
        switcher = TopicSwitcher(store, "owner")
        switcher.open()
        switcher.handle_key("c")
        for key in ["backspace"] * 3 + list("new"):
            switcher.handle_key(key)
        result = switcher.handle_key("enter")

        store.rename.assert_called_once_with("owner", "t0", "new")
        assert result.renamed_topic_id == "t0"
        assert result.title == "new"
        assert switcher.is_open

    def test_unchanged_rename_does_not_touch_store(self):
        store = _store("same")
        switcher = TopicSwitcher(store, "owner")
        switcher.open()
        switcher.handle_key("c")
        switcher.handle_key("escape")
        store.rename.assert_not_called()
        assert switcher.is_open

    def test_o_creates_and_starts_rename(self):
        store = _store("a")
        created = empty_topic("")
        store.create.return_value = created

        def listed(owner_id):
            return [TopicSummary("t0", "a"), TopicSummary(created.id, "")]

        switcher = TopicSwitcher(store, "owner")
        switcher.open()
        store.list_topics.side_effect = listed
        switcher.handle_key("o")

        store.create.assert_called_once_with("owner", "")
        assert switcher.selected == 1
        assert switcher.renaming

    def test_delete_reports_id(self):
        store = _store("a", "b")
        switcher = TopicSwitcher(store, "owner")
        switcher.open()
        result = switcher.handle_key("d")
        store.delete.assert_called_once_with("owner", "t0")
        assert result.deleted_topic_id == "t0"

    def test_escape_closes(self):
        switcher = TopicSwitcher(_store("a"), "owner")
        switcher.open()
        switcher.handle_key("escape")
        assert not switcher.is_open
