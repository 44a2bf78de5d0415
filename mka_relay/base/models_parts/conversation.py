"""Conversation record persisted by the conversation store."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


DEFAULT_TITLE = "New Conversation"


class ConversationType(str, Enum):
    """Kind of conversation; only ``chat`` drives the streaming relay."""

    CHAT = "chat"
    PPT = "ppt"
    VIDEO = "video"
    IMAGE = "image"


@dataclass(frozen=True)
class Conversation:
    """Conversation metadata row.

    The relay core treats ``id`` as opaque. Switching to a different id resets
    the in-memory message list held by the session.
    """

    id: str
    title: str
    type: ConversationType
    created_at: datetime
    updated_at: datetime


__all__ = ["Conversation", "ConversationType", "DEFAULT_TITLE"]
