from .conversation import DEFAULT_TITLE, Conversation, ConversationType
from .message import ROLES, FileRef, Message, Role
from .stream_event import Comment, ContentDelta, Done, Incomplete, Malformed, StreamEvent

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
