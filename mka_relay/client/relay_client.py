"""Chat relay client.

Purpose
-------
Send the conversation to the relay proxy and turn the streamed response into
an assistant message that grows while bytes arrive.

Flow
----
1. Fetch a fresh credential (``unauthenticated`` when there is none; no
   network call is made).
2. Open one streaming ``POST {relay_base_url}/api/chat``.
3. Inspect the status before reading any body bytes: 429, 402 and 401 map to
   their dedicated error kinds, any other non-2xx to ``upstream``.
4. Feed body chunks through :class:`EventStreamReader` into a
   :class:`MessageAccumulator`, calling ``on_update`` after every delta.
5. On ``[DONE]`` hand the final message to the speech dispatcher exactly once.

Cancellation
------------
The optional :class:`CancellationToken` is polled between chunks. Its
cancellation also cancels the task while it waits on a read, so a stalled
upstream cannot keep a switched-away conversation busy. Both paths surface as
:class:`~mka_relay.base.cancellation.CancelledError`.

Failure modes
-------------
Transport errors and timeouts become ``network`` errors. A body that closes
without ``[DONE]`` raises ``RelayError(network, "stream ended before
completion")``. A successful status with an empty body is an ``upstream``
error instead, since nothing was ever streamed. Deltas already delivered
through ``on_update`` stay with the caller.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Callable, List, Optional, Sequence

import httpx

from ..base.cancellation import CancellationToken, CancelledError
from ..base.errors import RelayError, RelayErrorKind, classify_exception, error_for_status
from ..base.http import get_async_client
from ..base.log_support import LogContext
from ..base.logging import get_logger, log_event, normalized_log_event
from ..base.models import Message, StreamEvent
from ..base.streaming import EventStreamReader, MessageAccumulator
from ..config import get_section_config
from .credentials import CredentialProvider
from .side_effects import AudioCallback, SpeechDispatcher

UpdateCallback = Callable[[MessageAccumulator], None]

CHAT_PATH = "/api/chat"

_logger = get_logger("relay.client")


class ChatRelayClient:
    """Stream one assistant reply per :meth:`send` call."""

    def __init__(
        self,
        credentials: CredentialProvider,
        *,
        relay_base_url: Optional[str] = None,
        dispatcher: Optional[SpeechDispatcher] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if relay_base_url is None:
            relay_base_url = get_section_config("client")["relay_base_url"]
        self._base_url = str(relay_base_url).rstrip("/")
        self._credentials = credentials
        self._dispatcher = dispatcher
        self._client = http_client

    @property
    def dispatcher(self) -> Optional[SpeechDispatcher]:
        return self._dispatcher

    def _http(self) -> httpx.AsyncClient:
        return self._client or get_async_client(None, "relay")

    async def send(
        self,
        history: Sequence[Message],
        new_message: Message,
        *,
        on_update: Optional[UpdateCallback] = None,
        on_audio: Optional[AudioCallback] = None,
        token: Optional[CancellationToken] = None,
    ) -> Message:
        """Relay ``history + [new_message]`` and return the final assistant message.

        Raises:
            ValueError: ``new_message`` has neither text nor attachments.
            RelayError: exactly one error kind per failed attempt.
            CancelledError: ``token`` was cancelled before completion.
        """
        if not new_message.content and not new_message.has_attachments():
            raise ValueError("message must have content or attachments")
        token = token or CancellationToken()
        token.raise_if_cancelled()

        access_token = await self._credentials.get_token()
        if not access_token:
            raise RelayError(kind=RelayErrorKind.UNAUTHENTICATED, message="no credential available")

        ctx = LogContext(request_id=uuid.uuid4().hex)
        reader = EventStreamReader(ctx=ctx)
        accumulator = MessageAccumulator()
        body = {"messages": [m.to_wire() for m in (*history, new_message)]}

        task = asyncio.current_task()
        loop = asyncio.get_running_loop()
        active = True

        def _cancel_now() -> None:
            if active and task is not None:
                task.cancel()

        def _on_token_cancel(reason: Optional[str]) -> None:
            loop.call_soon_threadsafe(_cancel_now)

        unregister = token.add_callback(_on_token_cancel)
        reader.metrics.start()
        normalized_log_event(_logger, "relay.start", ctx, phase="start", emitted=False, deltas=0, messages=len(body["messages"]))
        try:
            await self._stream(body, access_token, reader, accumulator, on_update, token)
        except asyncio.CancelledError:
            if not token.cancelled:
                raise
            if task is not None:
                task.uncancel()
            self._log_cancelled(ctx, accumulator)
            raise CancelledError(token.reason or "relay cancelled") from None
        except CancelledError:
            self._log_cancelled(ctx, accumulator)
            raise
        except RelayError as err:
            self._log_error(ctx, accumulator, err)
            raise
        except httpx.HTTPError as exc:
            err = classify_exception(exc)
            self._log_error(ctx, accumulator, err)
            raise err from exc
        finally:
            active = False
            unregister()

        reader.metrics.finish()
        final = accumulator.snapshot()
        normalized_log_event(
            _logger,
            "relay.end",
            ctx,
            phase="finalize",
            emitted=bool(accumulator.deltas),
            deltas=len(accumulator.deltas),
            **reader.metrics.as_fields(),
        )
        if self._dispatcher is not None:
            self._dispatcher.dispatch(final, on_audio)
        return final

    async def _stream(
        self,
        body: dict,
        access_token: str,
        reader: EventStreamReader,
        accumulator: MessageAccumulator,
        on_update: Optional[UpdateCallback],
        token: CancellationToken,
    ) -> None:
        headers = {"Authorization": f"Bearer {access_token}"}
        received = False
        async with self._http().stream("POST", f"{self._base_url}{CHAT_PATH}", json=body, headers=headers) as resp:
            err = error_for_status(resp.status_code)
            if err is not None:
                log_event(_logger, "relay.http_error", level=logging.WARNING, status=resp.status_code, kind=err.kind.value)
                raise err
            status = resp.status_code
            async for chunk in resp.aiter_bytes():
                token.raise_if_cancelled()
                received = received or bool(chunk)
                self._apply(reader.feed(chunk), reader, accumulator, on_update)
                if reader.done:
                    break
            if not reader.done:
                self._apply(reader.finish(), reader, accumulator, on_update)
        if not reader.done:
            if not received:
                raise RelayError(kind=RelayErrorKind.UPSTREAM, message="empty response body", status_code=status)
            raise RelayError(kind=RelayErrorKind.NETWORK, message="stream ended before completion")

    @staticmethod
    def _apply(events: List[StreamEvent], reader: EventStreamReader, accumulator: MessageAccumulator, on_update: Optional[UpdateCallback]) -> None:
        for event in events:
            if accumulator.apply(event) is None:
                continue
            reader.metrics.record_delta(event.text)
            if on_update is not None:
                on_update(accumulator)

    def _log_error(self, ctx: LogContext, accumulator: MessageAccumulator, err: RelayError) -> None:
        normalized_log_event(
            _logger,
            "relay.error",
            ctx,
            phase="error",
            error_code=err.kind.value,
            emitted=bool(accumulator.deltas),
            deltas=len(accumulator.deltas),
            level=logging.WARNING,
            status=err.status_code,
            message=err.message,
        )

    def _log_cancelled(self, ctx: LogContext, accumulator: MessageAccumulator) -> None:
        normalized_log_event(
            _logger,
            "relay.cancelled",
            ctx,
            phase="cancelled",
            emitted=bool(accumulator.deltas),
            deltas=len(accumulator.deltas),
        )


__all__ = ["CHAT_PATH", "ChatRelayClient", "UpdateCallback"]
