"""Topic commands: engram topic add|list|show|rename|delete|cards"""

import sys

import typer

from engram.anki.cards import extract_cards, render_tsv
from engram.db.store import TopicSummary
from engram.db.workdb import open_work_store


def _resolve_topic(work, selector: str) -> TopicSummary:
    """Resolve topic selector (index, UUID, or title) to a summary."""
    rows = work.store.list_topics(work.owner_id)

    if not rows:
        print("No topics found.")
        sys.exit(1)

    if selector.isdigit():
        idx = int(selector)
        if 1 <= idx <= len(rows):
            return rows[idx - 1]
        print(f"Invalid index: {selector}")
        sys.exit(1)

    for row in rows:
        if row.id == selector:
            return row

    matches = [row for row in rows if row.title == selector]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        print(f"Ambiguous title: {selector}")
        sys.exit(1)

    print(f"Topic not found: {selector}")
    sys.exit(1)


def _title(title: str) -> str:
    return title or "Untitled"


def register(app: typer.Typer):
    @app.command()
    def add(title: str):
        """Add a new topic."""
        try:
            with open_work_store() as work:
                work.store.create(work.owner_id, title)
        except RuntimeError as e:
            print(str(e))
            sys.exit(1)

        print(f"✓ Topic added: {title}")

    @app.command("list")
    def list_topics():
        """List all topics."""
        try:
            with open_work_store() as work:
                rows = work.store.list_topics(work.owner_id)
        except RuntimeError as e:
            print(str(e))
            sys.exit(1)

        if not rows:
            print("No topics yet.")
            return

        print("Topics:")
        for idx, row in enumerate(rows, 1):
            print(f"[{idx}] {_title(row.title)} ({row.id})")

    @app.command()
    def show(selector: str):
        """Print a topic's concepts and derivatives."""
        try:
            with open_work_store() as work:
                row = _resolve_topic(work, selector)
                topic = work.store.load(work.owner_id, row.id)
        except RuntimeError as e:
            print(str(e))
            sys.exit(1)

        if topic is None:
            print(f"Topic not found: {selector}")
            sys.exit(1)

        print(_title(topic.title))
        for c_idx, concept in enumerate(topic.concepts, 1):
            print(f"  {c_idx}. {concept.text}")
            for derivative in concept.derivatives:
                print(f"     [{derivative.type.value}] {derivative.text}")

    @app.command()
    def rename(selector: str, title: str):
        """Rename a topic."""
        try:
            with open_work_store() as work:
                row = _resolve_topic(work, selector)
                work.store.rename(work.owner_id, row.id, title)
        except RuntimeError as e:
            print(str(e))
            sys.exit(1)

        print(f"✓ Topic renamed: {_title(row.title)} → {title}")

    @app.command()
    def delete(selector: str):
        """Delete a topic by index, UUID or title."""
        try:
            with open_work_store() as work:
                row = _resolve_topic(work, selector)
                work.store.delete(work.owner_id, row.id)
        except RuntimeError as e:
            print(str(e))
            sys.exit(1)

        print(f"✓ Topic deleted: {_title(row.title)}")

    @app.command()
    def cards(selector: str):
        """Print a topic's flashcards as Anki import TSV."""
        try:
            with open_work_store() as work:
                row = _resolve_topic(work, selector)
                topic = work.store.load(work.owner_id, row.id)
        except RuntimeError as e:
            print(str(e))
            sys.exit(1)

        if topic is None:
            print(f"Topic not found: {selector}")
            sys.exit(1)

        found = extract_cards(topic)
        if not found:
            print("No cards.")
            return
        sys.stdout.write(render_tsv(found))
