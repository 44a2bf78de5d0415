"""Repository & Unit of Work protocols for the conversation store.

Controllers and the conversation session depend only on these abstractions;
the SQLite implementation lives under ``persistence/sqlite/``.

Failure / Error Semantics:
- Repository methods raise backend exceptions only for I/O or integrity
  failures. Lookups of unknown ids return ``None`` / ``False``.
- Transaction control belongs to the ``IUnitOfWork``; repositories never
  commit on their own.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from ...base.models import Conversation, ConversationType


class IConversationRepo(Protocol):
    """Conversation metadata storage."""

    def create(self, title: Optional[str] = None, type: ConversationType = ConversationType.CHAT) -> Conversation:
        """Insert a conversation and return it (default title when ``None``)."""
        ...

    def get(self, conversation_id: str) -> Optional[Conversation]:
        ...

    def list_recent(self, type: Optional[ConversationType] = None, limit: int = 50) -> Iterable[Conversation]:
        """Conversations ordered by ``updated_at`` descending."""
        ...

    def touch(self, conversation_id: str) -> bool:
        """Bump ``updated_at``; returns False for unknown ids."""
        ...

    def rename(self, conversation_id: str, title: str) -> bool:
        ...

    def delete(self, conversation_id: str) -> bool:
        ...


class IUnitOfWork(Protocol):
    """Transaction boundary aggregating repositories."""

    conversations: IConversationRepo

    def __enter__(self) -> "IUnitOfWork":
        ...

    def __exit__(self, exc_type, exc, tb) -> None:
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


__all__ = ["IConversationRepo", "IUnitOfWork"]
