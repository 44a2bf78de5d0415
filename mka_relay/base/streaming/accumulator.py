"""Incremental message accumulator.

Deltas are kept in an append-only log and replayed into immutable
:class:`Message` snapshots. A renderer holding an earlier snapshot keeps a
consistent value; each applied delta produces a new one.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from ..models import ContentDelta, Done, Message


class MessageAccumulator:
    """Fold ``ContentDelta`` events into one assistant message."""

    def __init__(self) -> None:
        self._deltas: List[str] = []
        self._text = ""
        self._snapshot: Optional[Message] = None
        self._folded: Optional[Message] = None
        self._done = False

    @property
    def deltas(self) -> Tuple[str, ...]:
        return tuple(self._deltas)

    @property
    def text(self) -> str:
        return self._text

    @property
    def done(self) -> bool:
        return self._done

    def snapshot(self) -> Message:
        """Return the current assistant message."""
        if self._snapshot is None:
            self._snapshot = Message(role="assistant", content=self._text)
        return self._snapshot

    def apply(self, event: object) -> Optional[Message]:
        """Apply one stream event.

        Returns the new snapshot for a content delta, ``None`` otherwise.
        ``Done`` freezes the accumulator; later deltas are ignored.
        """
        if self._done:
            return None
        if isinstance(event, Done):
            self._done = True
            return None
        if not isinstance(event, ContentDelta):
            return None
        self._deltas.append(event.text)
        self._text += event.text
        self._snapshot = Message(role="assistant", content=self._text)
        return self._snapshot

    def fold_into(self, messages: Tuple[Message, ...]) -> Tuple[Message, ...]:
        """Place the current snapshot into ``messages`` (returns a new tuple).

        The last entry is replaced only when it is the snapshot this
        accumulator placed previously; otherwise the snapshot is appended.
        """
        snap = self.snapshot()
        if messages and self._folded is not None and messages[-1] is self._folded:
            result = messages[:-1] + (snap,)
        else:
            result = tuple(messages) + (snap,)
        self._folded = snap
        return result


__all__ = ["MessageAccumulator"]
