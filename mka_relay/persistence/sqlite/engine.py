"""SQLite engine helpers for the conversation store.

Purpose
-------
Open SQLite connections with the centralized PRAGMA settings and ensure the
schema exists. Standard library only; no side effects at import time.

The ``conversations`` table mirrors the hosted schema: a text uuid primary
key, a title defaulting to ``New Conversation``, a ``type`` constrained to
chat/ppt/video/image and ISO8601 UTC timestamps.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from ...config.defaults import DEFAULT_DB_PATH, SQLITE_PRAGMAS

MEMORY_DB = ":memory:"


def get_db_path(db_path: Optional[str] = None) -> str:
    """Return the database location (``~`` expanded; ``:memory:`` kept)."""
    if db_path == MEMORY_DB:
        return db_path
    return str(Path(db_path or DEFAULT_DB_PATH).expanduser())


def create_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open a connection with ``sqlite3.Row`` rows and PRAGMAs applied.

    ``check_same_thread`` is disabled because the async session hands the
    unit of work to a worker thread.
    """
    path = get_db_path(db_path)
    if path != MEMORY_DB:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    for name, value in SQLITE_PRAGMAS:
        if path == MEMORY_DB and name == "journal_mode":
            continue
        conn.execute(f"PRAGMA {name}={value};")
    return conn


def init_schema(conn: sqlite3.Connection) -> None:
    """Create the ``conversations`` table and index if missing, then commit."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS conversations (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL DEFAULT 'New Conversation',
            type TEXT NOT NULL DEFAULT 'chat'
                CHECK (type IN ('chat', 'ppt', 'video', 'image')),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_conversations_updated ON conversations(updated_at DESC);"
    )
    conn.commit()


__all__ = ["MEMORY_DB", "create_connection", "get_db_path", "init_schema"]
