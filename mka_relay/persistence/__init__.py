"""Conversation store: repository protocols and the SQLite implementation."""

from .interfaces import IConversationRepo, IUnitOfWork
from .sqlite import ConversationRepoSqlite, UnitOfWorkSqlite, get_uow

__all__ = [
    "IConversationRepo",
    "IUnitOfWork",
    "ConversationRepoSqlite",
    "UnitOfWorkSqlite",
    "get_uow",
]
