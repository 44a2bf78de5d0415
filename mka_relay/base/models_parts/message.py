"""
Chat message model shared by the relay client and the conversation session.

Defines the immutable `Message` dataclass, the `Role` literal and the
`FileRef` attachment descriptor. Messages never change after construction:
the accumulator builds a fresh snapshot per delta and the speech dispatcher
derives the voiced copy through ``with_audio``, so snapshots handed to a
renderer stay valid.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Literal, Optional, Tuple


# Message roles accepted by the relay proxy.
Role = Literal["system", "user", "assistant"]

ROLES: Tuple[str, ...] = ("user", "assistant", "system")


@dataclass(frozen=True)
class FileRef:
    """Reference to a file the user attached to a message.

    Only the name travels on the wire (as an inline marker); the other fields
    are kept for display and persistence.
    """

    name: str
    mime_type: Optional[str] = None
    size: Optional[int] = None


@dataclass(frozen=True)
class Message:
    """A single chat message.

    Attributes:
        role: Author role (``"user"``, ``"assistant"`` or ``"system"``).
        content: Plain text body. Assistant messages grow while streaming.
        attached_files: Files attached by the user, in attachment order.
        synthesized_audio: Base64 encoded audio for the message text, set
            after the post-stream speech call completes.
    """

    role: Role
    content: str
    attached_files: Tuple[FileRef, ...] = field(default_factory=tuple)
    synthesized_audio: Optional[str] = None

    def has_attachments(self) -> bool:
        return bool(self.attached_files)

    def with_audio(self, audio: str) -> "Message":
        """Return a copy carrying synthesized ``audio``."""
        return replace(self, synthesized_audio=audio)

    def to_wire(self) -> Dict[str, str]:
        """Return the ``{role, content}`` mapping sent to the relay proxy.

        Attachment names are prepended as ``[Attached file: name]`` lines so
        the model sees what the user referred to.
        """
        content = self.content
        if self.attached_files:
            markers = "\n".join(f"[Attached file: {f.name}]" for f in self.attached_files)
            content = f"{markers}\n\n{content}" if content else markers
        return {"role": self.role, "content": content}


__all__ = ["FileRef", "Message", "ROLES", "Role"]
