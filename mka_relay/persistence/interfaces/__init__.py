from .repos import IConversationRepo, IUnitOfWork

__all__ = ["IConversationRepo", "IUnitOfWork"]
