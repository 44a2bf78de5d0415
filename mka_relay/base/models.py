"""Relay data models (public API facade).

Import models from ``mka_relay.base.models``; the implementations live in
``models_parts`` one concept per module.
"""

from .models_parts import (
    DEFAULT_TITLE,
    ROLES,
    Comment,
    ContentDelta,
    Conversation,
    ConversationType,
    Done,
    FileRef,
    Incomplete,
    Malformed,
    Message,
    Role,
    StreamEvent,
)

__all__ = [
    "Comment",
    "ContentDelta",
    "Conversation",
    "ConversationType",
    "DEFAULT_TITLE",
    "Done",
    "FileRef",
    "Incomplete",
    "Malformed",
    "Message",
    "ROLES",
    "Role",
    "StreamEvent",
]
