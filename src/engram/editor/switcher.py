"""Topic switcher overlay (leader + a).

Lists the owner's topics from the store and handles its own keys.
The engine decides what opening or deleting a topic means for the
document; the switcher only reports it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from engram.db.store import TopicStore, TopicSummary

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwitcherResult:
    open_topic_id: Optional[str] = None
    deleted_topic_id: Optional[str] = None
    renamed_topic_id: Optional[str] = None
    title: str = ""


class TopicSwitcher:
    def __init__(self, store: TopicStore, owner_id: str) -> None:
        self.store = store
        self.owner_id = owner_id
        self.is_open = False
        self.items: list[TopicSummary] = []
        self.selected = 0
        self.renaming = False
        self.rename_buffer = ""

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self, current_topic_id: Optional[str] = None) -> None:
        self.refresh()
        self.is_open = True
        self.renaming = False
        self.selected = next(
            (i for i, item in enumerate(self.items) if item.id == current_topic_id),
            0,
        )

    def close(self) -> None:
        self.is_open = False
        self.renaming = False
        self.rename_buffer = ""

    def refresh(self) -> None:
        self.items = list(self.store.list_topics(self.owner_id))
        if self.selected >= len(self.items):
            self.selected = max(0, len(self.items) - 1)

    @property
    def selected_item(self) -> Optional[TopicSummary]:
        if 0 <= self.selected < len(self.items):
            return self.items[self.selected]
        return None

    # -------------------------------------------------------------------------
    # Keys
    # -------------------------------------------------------------------------

    def handle_key(self, key: str) -> SwitcherResult:
        if self.renaming:
            return self._handle_rename_key(key)

        if key == "escape":
            self.close()
        elif key == "j":
            self.selected = min(self.selected + 1, max(0, len(self.items) - 1))
        elif key == "k":
            self.selected = max(0, self.selected - 1)
        elif key == "o":
            topic = self.store.create(self.owner_id, "")
            log.info("switcher: created topic %s", topic.id)
            self.refresh()
            self.selected = next(
                (i for i, item in enumerate(self.items) if item.id == topic.id),
                len(self.items) - 1,
            )
            self.renaming = True
            self.rename_buffer = ""
        elif key == "c":
            item = self.selected_item
            if item is not None:
                self.renaming = True
                self.rename_buffer = item.title
        elif key == "d":
            item = self.selected_item
            if item is not None:
                self.store.delete(self.owner_id, item.id)
                log.info("switcher: deleted topic %s", item.id)
                self.refresh()
                return SwitcherResult(deleted_topic_id=item.id)
        elif key in ("enter", "l"):
            item = self.selected_item
            if item is not None:
                self.close()
                return SwitcherResult(open_topic_id=item.id)
        return SwitcherResult()

    def _handle_rename_key(self, key: str) -> SwitcherResult:
        if key in ("escape", "enter"):
            return self._finish_rename()
        if key == "backspace":
            self.rename_buffer = self.rename_buffer[:-1]
        elif len(key) == 1 and key.isprintable():
            self.rename_buffer += key
        return SwitcherResult()

    def _finish_rename(self) -> SwitcherResult:
        self.renaming = False
        item = self.selected_item
        if item is None:
            return SwitcherResult()
        title = self.rename_buffer
        self.rename_buffer = ""
        if title == item.title:
            return SwitcherResult()
        self.store.rename(self.owner_id, item.id, title)
        self.refresh()
        return SwitcherResult(renamed_topic_id=item.id, title=title)
