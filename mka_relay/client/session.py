"""Conversation session: the caller-facing side of the relay.

``ConversationSession`` owns the in-memory message list of the active
conversation and enforces one in-flight relay at a time. It converts relay
errors into exactly one user notification, keeps partial assistant output on
failure, and records conversation metadata in the optional store. Store failures are
logged and never interrupt a reply.

Switching conversations cancels the session's scope token. The in-flight
relay runs under a child of that token, so it stops reading and none of its
late deltas or audio land in the new conversation's messages.
"""
from __future__ import annotations

import asyncio
import logging
import sqlite3
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from ..base.cancellation import CancellationToken, CancelledError
from ..base.errors import RelayBusyError, RelayError
from ..base.log_support import LogContext
from ..base.logging import get_logger, log_event
from ..base.models import ConversationType, FileRef, Message
from ..base.streaming import MessageAccumulator
from ..config.defaults import CONVERSATION_TITLE_CHARS
from ..persistence.interfaces import IUnitOfWork
from .notifications import LoggingNotifier, Notifier, notification_for
from .relay_client import ChatRelayClient

ChangeCallback = Callable[[Tuple[Message, ...]], None]
UnitOfWorkFactory = Callable[[], IUnitOfWork]

_logger = get_logger("relay.session")


@dataclass(frozen=True)
class RelayResult:
    """Outcome of one :meth:`ConversationSession.send` call.

    ``message`` is the final assistant message on success, the partial one
    (or ``None``) on failure.
    """

    message: Optional[Message] = None
    error: Optional[RelayError] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.cancelled


class ConversationSession:
    """Drive relays for one conversation at a time."""

    def __init__(
        self,
        relay: ChatRelayClient,
        *,
        notifier: Optional[Notifier] = None,
        uow_factory: Optional[UnitOfWorkFactory] = None,
        conversation_id: Optional[str] = None,
        conversation_type: ConversationType = ConversationType.CHAT,
        on_change: Optional[ChangeCallback] = None,
    ) -> None:
        self._relay = relay
        self._notifier = notifier or LoggingNotifier()
        self._uow_factory = uow_factory
        self._conversation_id = conversation_id
        self._conversation_type = conversation_type
        self._on_change = on_change
        self._messages: Tuple[Message, ...] = ()
        self._scope = CancellationToken()
        self._generation = 0
        self._busy = False

    @property
    def conversation_id(self) -> Optional[str]:
        return self._conversation_id

    @property
    def messages(self) -> Tuple[Message, ...]:
        return self._messages

    @property
    def busy(self) -> bool:
        return self._busy

    def _set_messages(self, messages: Tuple[Message, ...]) -> None:
        self._messages = messages
        if self._on_change is not None:
            self._on_change(messages)

    def switch(self, conversation_id: Optional[str] = None) -> None:
        """Make ``conversation_id`` active, cancelling any in-flight relay.

        The message list is cleared; the caller loads history separately.
        """
        self._scope.cancel("conversation switched")
        self._scope = CancellationToken()
        self._generation += 1
        self._busy = False
        self._conversation_id = conversation_id
        self._set_messages(())
        log_event(_logger, "session.switch", LogContext(conversation_id=conversation_id))

    async def send(self, text: str, attachments: Iterable[FileRef] = ()) -> RelayResult:
        """Append a user message and relay the conversation.

        Raises:
            RelayBusyError: a relay is already in flight.
            ValueError: ``text`` is blank and nothing is attached.
        """
        if self._busy:
            raise RelayBusyError("a reply is still streaming")
        files = tuple(attachments)
        if not text.strip() and not files:
            raise ValueError("message must have content or attachments")

        self._busy = True
        generation = self._generation
        token = self._scope.child()
        user_message = Message(role="user", content=text, attached_files=files)
        history = self._messages
        self._set_messages(history + (user_message,))
        final_holder: dict = {}

        def on_update(acc: MessageAccumulator) -> None:
            if generation == self._generation:
                self._set_messages(acc.fold_into(self._messages))

        def on_audio(voiced: Message) -> None:
            target = final_holder.get("final")
            if generation != self._generation or target is None:
                return
            self._set_messages(tuple(voiced if m is target else m for m in self._messages))

        try:
            await self._ensure_conversation(text, generation)
            final = await self._relay.send(history, user_message, on_update=on_update, on_audio=on_audio, token=token)
        except CancelledError:
            return RelayResult(cancelled=True)
        except RelayError as err:
            self._notifier.notify(notification_for(err))
            return RelayResult(message=self._partial(generation, history), error=err)
        finally:
            if generation == self._generation:
                self._busy = False

        final_holder["final"] = final
        if generation == self._generation:
            await self._touch()
        return RelayResult(message=final)

    def _partial(self, generation: int, history: Tuple[Message, ...]) -> Optional[Message]:
        if generation != self._generation or len(self._messages) <= len(history) + 1:
            return None
        last = self._messages[-1]
        return last if last.role == "assistant" else None

    async def _ensure_conversation(self, text: str, generation: int) -> None:
        if self._uow_factory is None or self._conversation_id is not None:
            return
        title = text.strip()[:CONVERSATION_TITLE_CHARS] or None
        try:
            conv = await asyncio.to_thread(self._create_conversation, title)
        except sqlite3.Error as exc:
            log_event(_logger, "session.store_error", level=logging.WARNING, op="create", error=str(exc))
            return
        if generation != self._generation:
            return
        self._conversation_id = conv
        log_event(_logger, "session.conversation_created", LogContext(conversation_id=conv))

    def _create_conversation(self, title: Optional[str]) -> str:
        with self._uow_factory() as uow:  # type: ignore[misc]
            return uow.conversations.create(title, self._conversation_type).id

    async def _touch(self) -> None:
        if self._uow_factory is None or self._conversation_id is None:
            return
        conv_id = self._conversation_id

        def _run() -> None:
            with self._uow_factory() as uow:  # type: ignore[misc]
                uow.conversations.touch(conv_id)

        try:
            await asyncio.to_thread(_run)
        except sqlite3.Error as exc:
            log_event(_logger, "session.store_error", LogContext(conversation_id=conv_id), level=logging.WARNING, op="touch", error=str(exc))


__all__ = ["ConversationSession", "RelayResult"]
