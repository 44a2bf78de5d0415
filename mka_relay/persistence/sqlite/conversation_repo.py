"""SQLite-backed implementation of ``IConversationRepo``.

Timestamps are stored as ISO8601 UTC strings. Writes defer the commit to the
Unit of Work.
"""

from __future__ import annotations

import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

from ...base.models import DEFAULT_TITLE, Conversation, ConversationType
from ..interfaces.repos import IConversationRepo

_COLUMNS = "id, title, type, created_at, updated_at"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def _conversation_from_row(r: sqlite3.Row) -> Conversation:
    return Conversation(
        id=r["id"],
        title=r["title"],
        type=ConversationType(r["type"]),
        created_at=_parse_ts(r["created_at"]),
        updated_at=_parse_ts(r["updated_at"]),
    )


class ConversationRepoSqlite(IConversationRepo):
    """Conversation metadata repository over one SQLite connection."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def create(self, title: Optional[str] = None, type: ConversationType = ConversationType.CHAT) -> Conversation:
        now = _now()
        conv_id = str(uuid.uuid4())
        self.conn.execute(
            f"INSERT INTO conversations({_COLUMNS}) VALUES(?, ?, ?, ?, ?)",
            (conv_id, title or DEFAULT_TITLE, ConversationType(type).value, now, now),
        )
        created = self.get(conv_id)
        assert created is not None  # nosec B101 - row inserted above
        return created

    def get(self, conversation_id: str) -> Optional[Conversation]:
        cur = self.conn.execute(f"SELECT {_COLUMNS} FROM conversations WHERE id = ?", (conversation_id,))
        r = cur.fetchone()
        return _conversation_from_row(r) if r else None

    def list_recent(self, type: Optional[ConversationType] = None, limit: int = 50) -> Iterable[Conversation]:
        """Yield conversations newest-updated first, optionally of one type."""
        if type is None:
            cur = self.conn.execute(
                f"SELECT {_COLUMNS} FROM conversations ORDER BY updated_at DESC LIMIT ?",
                (limit,),
            )
        else:
            cur = self.conn.execute(
                f"SELECT {_COLUMNS} FROM conversations WHERE type = ? ORDER BY updated_at DESC LIMIT ?",
                (ConversationType(type).value, limit),
            )
        for r in cur.fetchall():
            yield _conversation_from_row(r)

    def touch(self, conversation_id: str) -> bool:
        cur = self.conn.execute(
            "UPDATE conversations SET updated_at = ? WHERE id = ?",
            (_now(), conversation_id),
        )
        return cur.rowcount > 0

    def rename(self, conversation_id: str, title: str) -> bool:
        cur = self.conn.execute(
            "UPDATE conversations SET title = ?, updated_at = ? WHERE id = ?",
            (title or DEFAULT_TITLE, _now(), conversation_id),
        )
        return cur.rowcount > 0

    def delete(self, conversation_id: str) -> bool:
        cur = self.conn.execute("DELETE FROM conversations WHERE id = ?", (conversation_id,))
        return cur.rowcount > 0


__all__ = ["ConversationRepoSqlite"]
