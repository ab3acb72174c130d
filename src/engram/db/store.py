"""Topic persistence.

Two backends behind one protocol:
- FileTopicStore: one JSON file per topic under .engram/topics/<owner>/
- PostgresTopicStore: the engram_documents table (topic tree as JSONB)

The stored title is authoritative: save() writes the concepts and keeps
whatever title rename() last set.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Protocol

from psycopg.types.json import Jsonb

from engram.editor.model import Topic, empty_topic, topic_from_dict, topic_to_dict

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TopicSummary:
    id: str
    title: str


class TopicStore(Protocol):
    def list_topics(self, owner_id: str) -> list[TopicSummary]: ...

    def load(self, owner_id: str, topic_id: str) -> Optional[Topic]: ...

    def save(self, owner_id: str, topic: Topic) -> None: ...

    def create(self, owner_id: str, title: str) -> Topic: ...

    def rename(self, owner_id: str, topic_id: str, title: str) -> None: ...

    def delete(self, owner_id: str, topic_id: str) -> None: ...


# =============================================================================
# File backend
# =============================================================================


class FileTopicStore:
    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def _owner_dir(self, owner_id: str) -> Path:
        return self.root / owner_id

    def _path(self, owner_id: str, topic_id: str) -> Path:
        return self._owner_dir(owner_id) / f"{topic_id}.json"

    def _read(self, path: Path) -> Optional[dict]:
        try:
            return json.loads(path.read_text())
        except FileNotFoundError:
            return None
        except json.JSONDecodeError:
            log.warning("Skipping unreadable topic file %s", path)
            return None

    def _write(self, path: Path, record: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(record, indent=2, ensure_ascii=False))
        tmp.replace(path)

    def list_topics(self, owner_id: str) -> list[TopicSummary]:
        owner_dir = self._owner_dir(owner_id)
        if not owner_dir.exists():
            return []
        records = []
        for path in owner_dir.glob("*.json"):
            record = self._read(path)
            if record is None:
                continue
            records.append((record.get("createdAt", 0), path.stem, record.get("title", "")))
        records.sort()
        return [TopicSummary(id=topic_id, title=title) for _, topic_id, title in records]

    def load(self, owner_id: str, topic_id: str) -> Optional[Topic]:
        record = self._read(self._path(owner_id, topic_id))
        if record is None:
            return None
        topic = topic_from_dict(record.get("topic") or {})
        return replace(topic, id=topic_id, title=record.get("title", topic.title))

    def save(self, owner_id: str, topic: Topic) -> None:
        path = self._path(owner_id, topic.id)
        record = self._read(path)
        now = time.time()
        if record is None:
            record = {"title": topic.title, "createdAt": now}
        record["topic"] = topic_to_dict(replace(topic, title=record["title"]))
        record["updatedAt"] = now
        self._write(path, record)

    def create(self, owner_id: str, title: str) -> Topic:
        topic = empty_topic(title)
        now = time.time()
        self._write(
            self._path(owner_id, topic.id),
            {"title": title, "createdAt": now, "updatedAt": now, "topic": topic_to_dict(topic)},
        )
        return topic

    def rename(self, owner_id: str, topic_id: str, title: str) -> None:
        path = self._path(owner_id, topic_id)
        record = self._read(path)
        if record is None:
            raise RuntimeError(f"Topic not found: {topic_id}")
        record["title"] = title
        if isinstance(record.get("topic"), dict):
            record["topic"]["title"] = title
        record["updatedAt"] = time.time()
        self._write(path, record)

    def delete(self, owner_id: str, topic_id: str) -> None:
        self._path(owner_id, topic_id).unlink(missing_ok=True)


# =============================================================================
# Postgres backend
# =============================================================================


def ensure_owner(conn, owner_id: str, email: str = "") -> None:
    """Make sure app_users has a row for the owner (engram_documents references it)."""
    conn.execute(
        "INSERT INTO app_users (id, email) VALUES (%s, %s) ON CONFLICT DO NOTHING",
        (owner_id, email or None),
    )
    conn.commit()


class PostgresTopicStore:
    def __init__(self, conn) -> None:
        self.conn = conn

    def list_topics(self, owner_id: str) -> list[TopicSummary]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT id, title FROM engram_documents WHERE owner_id = %s ORDER BY created_at, title",
            (owner_id,),
        )
        return [TopicSummary(id=str(row[0]), title=row[1]) for row in cur.fetchall()]

    def load(self, owner_id: str, topic_id: str) -> Optional[Topic]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT title, topic FROM engram_documents WHERE owner_id = %s AND id = %s",
            (owner_id, topic_id),
        )
        row = cur.fetchone()
        if row is None:
            return None
        title, data = row
        if isinstance(data, str):
            data = json.loads(data)
        return replace(topic_from_dict(data or {}), id=topic_id, title=title)

    def save(self, owner_id: str, topic: Topic) -> None:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT title FROM engram_documents WHERE owner_id = %s AND id = %s",
            (owner_id, topic.id),
        )
        row = cur.fetchone()
        if row is None:
            cur.execute(
                "INSERT INTO engram_documents (id, owner_id, title, topic) VALUES (%s, %s, %s, %s)",
                (topic.id, owner_id, topic.title, Jsonb(topic_to_dict(topic))),
            )
        else:
            stored = replace(topic, title=row[0])
            cur.execute(
                "UPDATE engram_documents SET topic = %s WHERE owner_id = %s AND id = %s",
                (Jsonb(topic_to_dict(stored)), owner_id, topic.id),
            )
        self.conn.commit()

    def create(self, owner_id: str, title: str) -> Topic:
        topic = empty_topic(title)
        self.conn.execute(
            "INSERT INTO engram_documents (id, owner_id, title, topic) VALUES (%s, %s, %s, %s)",
            (topic.id, owner_id, title, Jsonb(topic_to_dict(topic))),
        )
        self.conn.commit()
        return topic

    def rename(self, owner_id: str, topic_id: str, title: str) -> None:
        cur = self.conn.cursor()
        cur.execute(
            "UPDATE engram_documents "
            "SET title = %s, topic = jsonb_set(topic, '{title}', to_jsonb(%s::text)) "
            "WHERE owner_id = %s AND id = %s",
            (title, title, owner_id, topic_id),
        )
        if cur.rowcount == 0:
            self.conn.rollback()
            raise RuntimeError(f"Topic not found: {topic_id}")
        self.conn.commit()

    def delete(self, owner_id: str, topic_id: str) -> None:
        self.conn.execute(
            "DELETE FROM engram_documents WHERE owner_id = %s AND id = %s",
            (owner_id, topic_id),
        )
        self.conn.commit()
