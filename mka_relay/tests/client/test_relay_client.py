"""Tests for ChatRelayClient against a mocked relay proxy.

The proxy is an ``httpx.MockTransport``; streaming bodies are async
generators so chunk boundaries and stalls are under the test's control.
"""
from __future__ import annotations

import asyncio
import json
from typing import AsyncIterator, Iterable, List

import httpx
import pytest

from mka_relay.base.cancellation import CancellationToken, CancelledError
from mka_relay.base.errors import RelayError, RelayErrorKind
from mka_relay.base.models import FileRef, Message
from mka_relay.client import ChatRelayClient, SpeechDispatcher, StaticCredentialProvider

BASE_URL = "http://relay.test"


def _client(handler, token: str | None = "tok", dispatcher=None) -> ChatRelayClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ChatRelayClient(
        StaticCredentialProvider(token),
        relay_base_url=BASE_URL,
        dispatcher=dispatcher,
        http_client=http,
    )


async def _stream(chunks: Iterable[bytes], stall: asyncio.Event | None = None) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk
    if stall is not None:
        await stall.wait()


def _user(text: str = "hi") -> Message:
    return Message(role="user", content=text)


@pytest.mark.asyncio
async def test_streams_deltas_and_returns_final_message(make_event_body, split_chunks):
    body = make_event_body("Hel", "lo, ", "world")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=_stream(split_chunks(body, 5)), headers={"content-type": "text/event-stream"})

    seen: List[str] = []
    final = await _client(handler).send([], _user(), on_update=lambda acc: seen.append(acc.text))

    assert final == Message(role="assistant", content="Hello, world")  # nosec B101
    assert seen == ["Hel", "Hello, ", "Hello, world"]  # nosec B101


@pytest.mark.asyncio
async def test_request_shape_carries_bearer_and_attachment_markers(make_event_body):
    captured: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, content=make_event_body("ok"))

    history = [Message(role="user", content="earlier"), Message(role="assistant", content="reply")]
    new = Message(role="user", content="look at this", attached_files=(FileRef("report.pdf"),))
    await _client(handler, token="abc").send(history, new)

    request = captured[0]
    assert request.method == "POST"  # nosec B101
    assert str(request.url) == f"{BASE_URL}/api/chat"  # nosec B101
    assert request.headers["authorization"] == "Bearer abc"  # nosec B101
    body = json.loads(request.content)
    assert [m["role"] for m in body["messages"]] == ["user", "assistant", "user"]  # nosec B101
    assert body["messages"][-1]["content"] == "[Attached file: report.pdf]\n\nlook at this"  # nosec B101


@pytest.mark.parametrize(
    "status,kind",
    [
        (429, RelayErrorKind.RATE_LIMITED),
        (402, RelayErrorKind.PAYMENT_REQUIRED),
        (401, RelayErrorKind.UNAUTHENTICATED),
        (500, RelayErrorKind.UPSTREAM),
        (503, RelayErrorKind.UPSTREAM),
    ],
)
@pytest.mark.asyncio
async def test_error_status_maps_to_kind_without_updates(status, kind):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"error": "nope"})

    updates: List[str] = []
    with pytest.raises(RelayError) as info:
        await _client(handler).send([], _user(), on_update=lambda acc: updates.append(acc.text))

    assert info.value.kind is kind  # nosec B101
    assert info.value.status_code == status  # nosec B101
    assert updates == []  # nosec B101


@pytest.mark.asyncio
async def test_missing_credential_fails_before_network():
    calls: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    with pytest.raises(RelayError) as info:
        await _client(handler, token=None).send([], _user())

    assert info.value.kind is RelayErrorKind.UNAUTHENTICATED  # nosec B101
    assert calls == []  # nosec B101


@pytest.mark.asyncio
async def test_empty_message_is_rejected():
    with pytest.raises(ValueError):
        await _client(lambda r: httpx.Response(200)).send([], Message(role="user", content=""))


@pytest.mark.asyncio
async def test_stream_without_done_is_network_error_with_partial_updates(make_event_body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=make_event_body("par", "tial", done=False))

    updates: List[str] = []
    with pytest.raises(RelayError) as info:
        await _client(handler).send([], _user(), on_update=lambda acc: updates.append(acc.text))

    assert info.value.kind is RelayErrorKind.NETWORK  # nosec B101
    assert info.value.message == "stream ended before completion"  # nosec B101
    assert updates[-1] == "partial"  # nosec B101


@pytest.mark.asyncio
async def test_empty_body_is_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"")

    updates: List[str] = []
    with pytest.raises(RelayError) as info:
        await _client(handler).send([], _user(), on_update=lambda acc: updates.append(acc.text))

    assert info.value.kind is RelayErrorKind.UPSTREAM  # nosec B101
    assert info.value.status_code == 200  # nosec B101
    assert updates == []  # nosec B101


@pytest.mark.asyncio
async def test_connect_error_is_network():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RelayError) as info:
        await _client(handler).send([], _user())

    assert info.value.kind is RelayErrorKind.NETWORK  # nosec B101


class _FakeSynth:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    async def synthesize(self, text: str, voice: str) -> str:
        self.calls.append((text, voice))
        return "QUJD"


@pytest.mark.asyncio
async def test_speech_dispatched_once_after_done(make_event_body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=make_event_body("Hello"))

    synth = _FakeSynth()
    dispatcher = SpeechDispatcher(synth, voice="nova")
    voiced: List[Message] = []

    final = await _client(handler, dispatcher=dispatcher).send([], _user(), on_audio=voiced.append)
    await dispatcher.drain()

    assert synth.calls == [("Hello", "nova")]  # nosec B101
    assert voiced == [final.with_audio("QUJD")]  # nosec B101


@pytest.mark.asyncio
async def test_speech_not_dispatched_on_failure(make_event_body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=make_event_body("Hel", done=False))

    synth = _FakeSynth()
    dispatcher = SpeechDispatcher(synth)
    with pytest.raises(RelayError):
        await _client(handler, dispatcher=dispatcher).send([], _user())
    await dispatcher.drain()

    assert synth.calls == []  # nosec B101


@pytest.mark.asyncio
async def test_cancellation_interrupts_stalled_read(make_delta_line):
    stall = asyncio.Event()
    first_delta = asyncio.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=_stream([make_delta_line("partial").encode()], stall=stall))

    token = CancellationToken()
    updates: List[str] = []

    def on_update(acc) -> None:
        updates.append(acc.text)
        first_delta.set()

    task = asyncio.create_task(_client(handler).send([], _user(), on_update=on_update, token=token))
    await asyncio.wait_for(first_delta.wait(), timeout=5)
    token.cancel("conversation switched")

    with pytest.raises(CancelledError):
        await asyncio.wait_for(task, timeout=5)
    assert updates == ["partial"]  # nosec B101


@pytest.mark.asyncio
async def test_pre_cancelled_token_makes_no_request():
    calls: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    token = CancellationToken()
    token.cancel("gone")
    with pytest.raises(CancelledError):
        await _client(handler).send([], _user(), token=token)

    assert calls == []  # nosec B101


@pytest.mark.asyncio
async def test_relay_logs_start_and_end(make_event_body, log_events):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=make_event_body("a", "b"))

    await _client(handler).send([], _user())

    names = [e["event"] for e in log_events]
    assert "relay.start" in names and "relay.end" in names  # nosec B101
    end = next(e for e in log_events if e["event"] == "relay.end")
    assert end["deltas"] == 2  # nosec B101
