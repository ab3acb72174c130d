"""Engram TUI application.

- One Engine owns the document; the app only forwards keys and re-renders
- Views are pure functions of the engine (no store access in render())
- Document changes are saved after a short debounce
- AI generation runs as a Textual worker
"""

from __future__ import annotations

import logging
from contextlib import ExitStack
from pathlib import Path

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.widgets import Footer, Header

from engram.ai.generate import AISettings, init_generator
from engram.anki.cards import AnkiSync
from engram.db.workdb import ENGRAM_DIR, open_work_store
from engram.editor.engine import EditorSettings, Engine
from engram.tui.decorators import notify_errors, require_engine
from engram.tui.keys import engine_key
from engram.tui.views.switcher import SwitcherView
from engram.tui.views.topic import TopicView

log = logging.getLogger(__name__)

SAVE_DELAY = 0.5
ANKIFY_STATUS_SECONDS = 1.5


class EngramApp(App):
    CSS = """
    #main { height: 1fr; padding: 0 1; }
    #document, #switcher { height: 1fr; overflow-y: auto; }
    .block { height: auto; }
    .focused { background: $boost; }
    .selected { background: $accent 40%; }
    #mode-line, #hint-bar { height: 1; }
    #hint-bar { color: $text-muted; }
    """
    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
    ]

    def __init__(self, work_dir: Path | None = None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.work_dir = work_dir
        self.engine: Engine | None = None
        self.views = {"topic": TopicView(), "switcher": SwitcherView()}
        self._stack = ExitStack()
        self._save_timer = None
        self._ankify_timer = None

    def compose(self) -> ComposeResult:
        yield Header()
        yield Vertical(id="main")
        yield Footer()

    def on_mount(self) -> None:
        engram_dir = (self.work_dir or Path.cwd()) / ENGRAM_DIR
        if not engram_dir.exists():
            self.exit(message="Not an Engram work (missing .engram/)")
            return

        logging.basicConfig(
            filename=engram_dir / "tui.log",
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

        try:
            work = self._stack.enter_context(open_work_store(self.work_dir))
        except Exception as e:
            logging.exception("Failed to open work")
            self.exit(message=str(e))
            return

        self.title = "Engram"
        self.sub_title = work.profile.display_name

        self.engine = Engine(
            settings=EditorSettings.from_config(work.cfg),
            generator=init_generator(AISettings.from_config(work.cfg)),
            scheduler=self._schedule_generation,
            store=work.store,
            owner_id=work.owner_id,
            ankify=AnkiSync(),
        )
        self._load_first_topic(work)
        self.engine.subscribe(lambda _present: self._schedule_save())
        self._render_view()

    def _load_first_topic(self, work) -> None:
        topics = work.store.list_topics(work.owner_id)
        if topics:
            topic = work.store.load(work.owner_id, topics[0].id)
        else:
            topic = work.store.create(work.owner_id, "Untitled")
        if topic is not None:
            self.engine.load_topic(topic)

    def on_unmount(self) -> None:
        if self._save_timer is not None:
            self._save_timer.stop()
        if self.engine is not None:
            self.engine.save()
        self._stack.close()

    # =====================
    # Keys
    # =====================

    @require_engine
    @notify_errors
    def on_key(self, event: events.Key) -> None:
        result = self.engine.handle_key(engine_key(event.key, event.character))
        if result.consumed:
            event.stop()
            event.prevent_default()
        if self.engine.state.ankify_status == "SUCCESS" and self._ankify_timer is None:
            self.notify("Cards prepared for Anki")
            self._ankify_timer = self.set_timer(ANKIFY_STATUS_SECONDS, self._clear_ankify_status)
        self._render_view()

    def _clear_ankify_status(self) -> None:
        self._ankify_timer = None
        if self.engine is not None:
            self.engine.reset_ankify_status()
            self._render_view()

    # =====================
    # Persistence
    # =====================

    def _schedule_save(self) -> None:
        if self._save_timer is not None:
            self._save_timer.stop()
        self._save_timer = self.set_timer(SAVE_DELAY, self._save_now)

    @require_engine
    def _save_now(self) -> None:
        self._save_timer = None
        if not self.engine.save():
            self.notify("Save failed (see .engram/tui.log)", severity="error")

    # =====================
    # AI
    # =====================

    def _schedule_generation(self, coro) -> None:
        self.run_worker(self._run_generation(coro), group="ai", exit_on_error=False)
        self._render_view()

    async def _run_generation(self, coro) -> None:
        added = await coro
        if not added:
            self.notify("No derivatives generated", severity="warning")
        self._render_view()

    # =====================
    # Rendering
    # =====================

    def _render_view(self) -> None:
        """Schedule a view re-render.

        remove_children() / mount() are async; the exclusive worker keeps
        only the latest render so ids never collide in the DOM.
        """
        if self.engine is None:
            return

        self.run_worker(
            self._render_view_async(),
            group="render",
            exclusive=True,
            exit_on_error=False,
        )

    async def _render_view_async(self) -> None:
        if self.engine is None:
            return

        try:
            container = self.screen.query_one("#main")
        except NoMatches:
            return

        await container.remove_children()

        switcher = self.engine.switcher
        view = self.views["switcher" if switcher is not None and switcher.is_open else "topic"]
        await container.mount_all(view.render(self.engine))
