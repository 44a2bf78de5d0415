"""SQLite-backed Unit of Work.

Commits on clean context exit and rolls back otherwise. Repositories never
commit implicitly.
"""

from __future__ import annotations

import sqlite3

from ..interfaces.repos import IUnitOfWork
from .conversation_repo import ConversationRepoSqlite


class UnitOfWorkSqlite(IUnitOfWork):
    """Unit of Work over a single SQLite connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self.conversations = ConversationRepoSqlite(conn)
        self._active = False

    def __enter__(self) -> "UnitOfWorkSqlite":
        self._active = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._active = False

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        """Rollback the current transaction (idempotent)."""
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()


__all__ = ["UnitOfWorkSqlite"]
