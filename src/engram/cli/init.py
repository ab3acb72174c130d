"""
`engram init` command.

Policy layer:
- chooses defaults
- writes config
- prepares the chosen store (and a first topic)
"""

import sys
import uuid
from pathlib import Path

from engram.ai.generate import DEFAULT_API_KEY_ENV, DEFAULT_MODEL
from engram.db.workdb import ENGRAM_DIR, open_work_store, write_work_cfg


def default_cfg(owner_id: str, name: str, email: str, dsn: str | None) -> dict:
    store = {"kind": "postgres", "dsn": dsn} if dsn else {"kind": "file"}
    return {
        "owner": {"id": owner_id},
        "profile": {"name": name, "email": email, "avatar": None, "verified": False},
        "store": store,
        "ai": {"model": DEFAULT_MODEL, "api_key_env": DEFAULT_API_KEY_ENV},
        "editor": {"redo_key": "r", "show_key_buffer": True},
    }


def register(app):
    import typer

    @app.command()
    def init(
        path: Path = typer.Argument(Path.cwd(), help="Directory for the new work"),
        name: str = typer.Option("", help="Profile display name"),
        email: str = typer.Option("", help="Profile email"),
        postgres_dsn: str = typer.Option(
            "", "--postgres-dsn", help="Store topics in Postgres instead of files"
        ),
    ):
        path = path.resolve()
        path.mkdir(parents=True, exist_ok=True)

        engram_dir = path / ENGRAM_DIR
        if (engram_dir / "config.yml").exists():
            print(f"Already an Engram work: {path}")
            sys.exit(1)
        engram_dir.mkdir(exist_ok=True)
        (engram_dir / "topics").mkdir(exist_ok=True)

        cfg = default_cfg(str(uuid.uuid4()), name, email, postgres_dsn or None)
        write_work_cfg(engram_dir, cfg)

        try:
            with open_work_store(path) as work:
                if not work.store.list_topics(work.owner_id):
                    work.store.create(work.owner_id, "Untitled")
        except RuntimeError as e:
            print(str(e))
            sys.exit(1)

        print(f"Initialized Engram work at {path}")
