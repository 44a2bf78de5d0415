"""Tests for the speech HTTP client, credential providers and notifications."""
from __future__ import annotations

import json
from types import SimpleNamespace
from typing import List

import httpx
import pytest

from mka_relay.base.errors import RelayError, RelayErrorKind
from mka_relay.client import (
    HttpSpeechClient,
    StaticCredentialProvider,
    SupabaseCredentialProvider,
    notification_for,
)


def _speech(handler, token: str | None = "tok") -> HttpSpeechClient:
    return HttpSpeechClient(
        "http://relay.test/",
        StaticCredentialProvider(token),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


@pytest.mark.asyncio
async def test_synthesize_posts_text_and_voice():
    captured: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"audioContent": "bXAz"})

    audio = await _speech(handler).synthesize("Hello", "echo")

    assert audio == "bXAz"  # nosec B101
    assert captured[0].url.path == "/api/text-to-speech"  # nosec B101
    assert json.loads(captured[0].content) == {"text": "Hello", "voice": "echo"}  # nosec B101
    assert captured[0].headers["authorization"] == "Bearer tok"  # nosec B101


@pytest.mark.asyncio
async def test_transcribe_returns_text():
    def handler(request: httpx.Request) -> httpx.Response:
        assert json.loads(request.content)["mimeType"] == "audio/mp4"  # nosec B101
        return httpx.Response(200, json={"text": "hello world"})

    assert await _speech(handler).transcribe("AAAA", "audio/mp4") == "hello world"  # nosec B101


@pytest.mark.asyncio
async def test_speech_error_status_keeps_server_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "Failed to generate speech"})

    with pytest.raises(RelayError) as info:
        await _speech(handler).synthesize("Hello", "alloy")

    assert info.value.kind is RelayErrorKind.UPSTREAM  # nosec B101
    assert info.value.message == "Failed to generate speech"  # nosec B101


@pytest.mark.asyncio
async def test_speech_requires_credential():
    with pytest.raises(RelayError) as info:
        await _speech(lambda r: httpx.Response(200), token=None).synthesize("Hi", "alloy")
    assert info.value.kind is RelayErrorKind.UNAUTHENTICATED  # nosec B101


@pytest.mark.asyncio
async def test_missing_audio_content_is_upstream_error():
    with pytest.raises(RelayError) as info:
        await _speech(lambda r: httpx.Response(200, json={})).synthesize("Hi", "alloy")
    assert info.value.kind is RelayErrorKind.UPSTREAM  # nosec B101


class _FakeAuth:
    def __init__(self, session=None, error: Exception | None = None) -> None:
        self._session = session
        self._error = error

    def get_session(self):
        if self._error is not None:
            raise self._error
        return self._session


@pytest.mark.asyncio
async def test_supabase_provider_reads_session_token():
    client = SimpleNamespace(auth=_FakeAuth(SimpleNamespace(access_token="jwt-123")))
    assert await SupabaseCredentialProvider(client).get_token() == "jwt-123"  # nosec B101


@pytest.mark.asyncio
async def test_supabase_provider_without_session_returns_none():
    client = SimpleNamespace(auth=_FakeAuth(None))
    assert await SupabaseCredentialProvider(client).get_token() is None  # nosec B101


@pytest.mark.asyncio
async def test_supabase_provider_auth_failure_returns_none():
    client = SimpleNamespace(auth=_FakeAuth(error=RuntimeError("refresh failed")))
    assert await SupabaseCredentialProvider(client).get_token() is None  # nosec B101


@pytest.mark.asyncio
async def test_supabase_provider_requires_configuration():
    with pytest.raises(RuntimeError):
        await SupabaseCredentialProvider().get_token()


@pytest.mark.parametrize(
    "kind,title,description",
    [
        (RelayErrorKind.RATE_LIMITED, "Rate Limit Exceeded", "Please try again in a moment."),
        (RelayErrorKind.PAYMENT_REQUIRED, "Payment Required", "Please add credits to continue using MKA AI."),
        (RelayErrorKind.UNAUTHENTICATED, "Authentication Required", "Please log in again."),
        (RelayErrorKind.UPSTREAM, "Error", "Failed to get response from AI."),
        (RelayErrorKind.NETWORK, "Error", "Failed to get response from AI."),
    ],
)
def test_notification_text_per_kind(kind, title, description):
    note = notification_for(RelayError(kind=kind, message="x"))
    assert (note.title, note.description, note.variant) == (title, description, "destructive")  # nosec B101
