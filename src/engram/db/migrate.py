"""Schema migration engine for the Postgres store.

Applies numbered SQL migration files in order, tracking progress
in a schema_version table. Forward-only, idempotent on re-run.
"""

from __future__ import annotations

import logging
from pathlib import Path

log = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def _ensure_version_table(conn) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS schema_version (
            version INTEGER NOT NULL,
            applied_at TIMESTAMP NOT NULL DEFAULT now()
        )
    """)
    conn.commit()


def _current_version(conn) -> int:
    cur = conn.cursor()
    cur.execute("SELECT COALESCE(MAX(version), 0) FROM schema_version")
    return cur.fetchone()[0]


def migration_files(directory: Path = MIGRATIONS_DIR) -> list[tuple[int, Path]]:
    """Sorted (version, path) pairs; files are named 0001_description.sql."""
    if not directory.exists():
        return []
    files = []
    for p in sorted(directory.glob("*.sql")):
        try:
            version = int(p.stem.split("_", 1)[0])
        except ValueError:
            continue
        files.append((version, p))
    return sorted(files)


def migrate(conn, directory: Path = MIGRATIONS_DIR) -> int:
    """Apply all pending migrations. Returns number of migrations applied."""
    _ensure_version_table(conn)
    current = _current_version(conn)
    applied = 0

    for version, path in migration_files(directory):
        if version <= current:
            continue
        log.info("Applying migration %s", path.name)
        conn.execute(path.read_text())
        conn.execute("INSERT INTO schema_version (version) VALUES (%s)", (version,))
        conn.commit()
        applied += 1

    return applied
