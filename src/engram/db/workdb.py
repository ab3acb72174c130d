"""Work directory helper.

A work is any directory holding .engram/config.yml. Both the CLI and the
TUI go through open_work_store(), which picks the configured topic store
and closes any database connection on exit.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import psycopg
import yaml

from engram.auth.profile import Profile
from engram.db.migrate import migrate
from engram.db.store import FileTopicStore, PostgresTopicStore, TopicStore, ensure_owner

log = logging.getLogger(__name__)

ENGRAM_DIR = ".engram"
CONFIG_NAME = "config.yml"


@dataclass(frozen=True)
class WorkStore:
    work_dir: Path
    engram_dir: Path
    cfg: dict
    owner_id: str
    profile: Profile
    store: TopicStore
    conn: Optional[psycopg.Connection] = None


def load_work_cfg(work_dir: Path | None = None) -> tuple[Path, Path, dict]:
    work_dir = (work_dir or Path.cwd()).resolve()
    engram_dir = work_dir / ENGRAM_DIR
    if not engram_dir.exists():
        raise RuntimeError("Not an Engram work (missing .engram/)")

    cfg_path = engram_dir / CONFIG_NAME
    if not cfg_path.exists():
        raise RuntimeError("Invalid Engram work (missing config.yml)")

    cfg = yaml.safe_load(cfg_path.read_text()) or {}
    if not isinstance(cfg, dict):
        raise RuntimeError("Invalid Engram work (config.yml is not a mapping)")
    return work_dir, engram_dir, cfg


def write_work_cfg(engram_dir: Path, cfg: dict) -> None:
    (engram_dir / CONFIG_NAME).write_text(yaml.safe_dump(cfg, sort_keys=False))


def owner_id_from_cfg(cfg: dict) -> str:
    owner = cfg.get("owner") or {}
    owner_id = owner.get("id")
    if not owner_id:
        raise RuntimeError("Invalid Engram work (config.yml has no owner.id)")
    return str(owner_id)


def store_kind(cfg: dict) -> str:
    return str((cfg.get("store") or {}).get("kind") or "file")


def connect(cfg: dict) -> psycopg.Connection:
    dsn = (cfg.get("store") or {}).get("dsn")
    if not dsn:
        raise RuntimeError("Postgres store configured without store.dsn")
    return psycopg.connect(dsn)


@contextmanager
def open_work_store(work_dir: Path | None = None) -> Iterator[WorkStore]:
    work_dir, engram_dir, cfg = load_work_cfg(work_dir)
    owner_id = owner_id_from_cfg(cfg)
    profile = Profile.from_config(cfg)

    kind = store_kind(cfg)
    if kind == "file":
        yield WorkStore(
            work_dir=work_dir,
            engram_dir=engram_dir,
            cfg=cfg,
            owner_id=owner_id,
            profile=profile,
            store=FileTopicStore(engram_dir / "topics"),
        )
        return

    if kind != "postgres":
        raise RuntimeError(f"Unknown store kind: {kind}")

    conn = connect(cfg)
    try:
        migrate(conn)
        ensure_owner(conn, owner_id, profile.email)
        yield WorkStore(
            work_dir=work_dir,
            engram_dir=engram_dir,
            cfg=cfg,
            owner_id=owner_id,
            profile=profile,
            store=PostgresTopicStore(conn),
            conn=conn,
        )
    finally:
        conn.close()
