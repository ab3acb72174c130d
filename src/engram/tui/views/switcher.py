from rich.text import Text
from textual.containers import Vertical
from textual.widgets import Static

from engram.editor.engine import Engine
from engram.tui.views.base import View
from engram.tui.views.hints import hints_for


class SwitcherView(View):
    name = "switcher"

    def render(self, engine: Engine):
        switcher = engine.switcher
        rows = [Static("Topics", id="title")]
        if switcher is None or not switcher.items:
            rows.append(Static("No topics yet. o to create one.", classes="dim"))
        else:
            for idx, item in enumerate(switcher.items):
                selected = idx == switcher.selected
                title = item.title or "Untitled"
                if selected and switcher.renaming:
                    title = f"{switcher.rename_buffer}▏"
                marker = "▌" if selected else " "
                current = " •" if item.id == engine.topic.id else ""
                rows.append(
                    Static(
                        Text(f"{marker} {title}{current}"),
                        classes="block focused" if selected else "block",
                    )
                )
        return [
            Vertical(*rows, id="switcher"),
            Static(hints_for(engine), id="hint-bar"),
        ]
