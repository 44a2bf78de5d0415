from __future__ import annotations

import sqlite3
from typing import Optional

from .conversation_repo import ConversationRepoSqlite
from .engine import MEMORY_DB, create_connection, init_schema
from .unit_of_work import UnitOfWorkSqlite


def get_uow(db_path: Optional[str] = None) -> UnitOfWorkSqlite:
    conn: sqlite3.Connection = create_connection(db_path)
    init_schema(conn)
    return UnitOfWorkSqlite(conn)


__all__ = [
    "MEMORY_DB",
    "ConversationRepoSqlite",
    "UnitOfWorkSqlite",
    "create_connection",
    "get_uow",
    "init_schema",
]
