"""Main CLI application wiring for Engram.

kubectl-style subcommands:
  engram topic add "Title"
  engram topics list
  engram topic show 1

Both singular and plural forms work identically.
"""

import typer

app = typer.Typer(add_completion=False, help="Engram — modal note authoring for study")


@app.callback()
def main():
    """Engram CLI."""
    pass


# =============================================================================
# Subcommand groups
# =============================================================================

topic_app = typer.Typer(help="Manage topics")
app.add_typer(topic_app, name="topic")
app.add_typer(topic_app, name="topics")


# =============================================================================
# Register commands
# =============================================================================

from engram.cli import init as init_cmd
from engram.cli import status as status_cmd
from engram.cli import topic as topic_cmd

topic_cmd.register(topic_app)
init_cmd.register(app)
status_cmd.register(app)


@app.command()
def tui():
    """Launch the Engram TUI."""
    from engram.tui.app import EngramApp

    EngramApp().run()
