"""Tests for ``/api/text-to-speech`` and ``/api/transcribe``."""
from __future__ import annotations

import base64
from typing import List, Optional

import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from mka_relay.service.app import create_app
from mka_relay.service.app_parts.app_core import get_authenticator, get_speech_provider
from mka_relay.service.auth import AuthenticatedUser
from mka_relay.service.speech import INVALID_AUDIO, NO_SPEECH, SERVICE_UNAVAILABLE, TRANSCRIPTION_FAILED
from mka_relay.service.speech_provider import OpenAISpeechProvider, file_extension_for

GOOD = {"Authorization": "Bearer good-token"}
AUDIO_B64 = base64.b64encode(b"\x1aE\xdf\xa3 fake webm bytes").decode("ascii")
_OPENAI_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/audio/transcriptions")


class _Authenticator:
    async def authenticate(self, token: str) -> Optional[AuthenticatedUser]:
        return AuthenticatedUser(id="user-1") if token == "good-token" else None


class _Provider:
    def __init__(self, *, transcript: str = "hello world", error: Exception | None = None) -> None:
        self.transcript = transcript
        self.error = error
        self.tts_calls: List[tuple] = []
        self.stt_calls: List[tuple] = []

    async def synthesize(self, text: str, voice: str) -> bytes:
        self.tts_calls.append((text, voice))
        if self.error is not None:
            raise self.error
        return b"ID3 mp3 bytes"

    async def transcribe(self, audio: bytes, mime_type: str) -> str:
        self.stt_calls.append((audio, mime_type))
        if self.error is not None:
            raise self.error
        return self.transcript


def _client(provider) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_authenticator] = lambda: _Authenticator()
    app.dependency_overrides[get_speech_provider] = lambda: provider
    return TestClient(app)


def _status_error(cls, status: int):
    return cls("provider error", response=httpx.Response(status, request=_OPENAI_REQUEST), body=None)


# ---------------- text-to-speech ----------------


def test_tts_returns_base64_audio_with_default_voice():
    provider = _Provider()
    resp = _client(provider).post("/api/text-to-speech", json={"text": "Hello"}, headers=GOOD)
    assert resp.status_code == 200  # nosec B101
    assert base64.b64decode(resp.json()["audioContent"]) == b"ID3 mp3 bytes"  # nosec B101
    assert provider.tts_calls == [("Hello", "alloy")]  # nosec B101


def test_tts_requires_authentication():
    provider = _Provider()
    resp = _client(provider).post("/api/text-to-speech", json={"text": "Hello"})
    assert resp.status_code == 401  # nosec B101
    assert provider.tts_calls == []  # nosec B101


@pytest.mark.parametrize(
    "body,message",
    [
        ({}, "Text must be a non-empty string"),
        ({"text": ""}, "Text must be a non-empty string"),
        ({"text": "x" * 10001}, "Text cannot exceed 10,000 characters"),
        ({"text": "hi", "voice": "robot"}, "Invalid voice. Must be one of: alloy, echo, fable, onyx, nova, shimmer"),
    ],
)
def test_tts_validation(body, message):
    resp = _client(_Provider()).post("/api/text-to-speech", json=body, headers=GOOD)
    assert resp.status_code == 400  # nosec B101
    assert resp.json() == {"error": message}  # nosec B101


def test_tts_provider_failure_is_500():
    provider = _Provider(error=openai.APIConnectionError(request=_OPENAI_REQUEST))
    resp = _client(provider).post("/api/text-to-speech", json={"text": "Hello"}, headers=GOOD)
    assert resp.status_code == 500  # nosec B101
    assert resp.json() == {"error": "Failed to generate speech"}  # nosec B101


def test_tts_without_speech_key_is_500():
    resp = _client(OpenAISpeechProvider()).post("/api/text-to-speech", json={"text": "Hello"}, headers=GOOD)
    assert resp.status_code == 500  # nosec B101
    assert "SPEECH_API_KEY" in resp.json()["error"]  # nosec B101


# ---------------- transcribe ----------------


def test_transcribe_returns_text_and_passes_mime_type():
    provider = _Provider(transcript="turn on the lights")
    resp = _client(provider).post(
        "/api/transcribe", json={"audio": AUDIO_B64, "mimeType": "audio/mp4"}, headers=GOOD
    )
    assert resp.status_code == 200  # nosec B101
    assert resp.json() == {"text": "turn on the lights"}  # nosec B101
    audio, mime = provider.stt_calls[0]
    assert audio == base64.b64decode(AUDIO_B64)  # nosec B101
    assert mime == "audio/mp4"  # nosec B101


def test_transcribe_defaults_to_webm():
    provider = _Provider()
    _client(provider).post("/api/transcribe", json={"audio": AUDIO_B64}, headers=GOOD)
    assert provider.stt_calls[0][1] == "audio/webm"  # nosec B101


@pytest.mark.parametrize("body", [{}, {"audio": ""}, {"audio": 42}, {"audio": "not base64!!"}])
def test_transcribe_rejects_missing_or_invalid_audio(body):
    resp = _client(_Provider()).post("/api/transcribe", json=body, headers=GOOD)
    assert resp.status_code == 400  # nosec B101
    assert resp.json() == {"error": "Audio data must be a base64 encoded string"}  # nosec B101


def test_transcribe_rejects_oversized_audio(monkeypatch):
    monkeypatch.setattr("mka_relay.base.dto.relay.MAX_AUDIO_BYTES", 16)
    provider = _Provider()
    resp = _client(provider).post("/api/transcribe", json={"audio": "A" * 32}, headers=GOOD)
    assert resp.status_code == 400  # nosec B101
    assert resp.json() == {"error": "Audio file size cannot exceed 25MB"}  # nosec B101
    assert provider.stt_calls == []  # nosec B101


@pytest.mark.parametrize(
    "error,status,message",
    [
        (_status_error(openai.BadRequestError, 400), 400, INVALID_AUDIO),
        (_status_error(openai.AuthenticationError, 401), 503, SERVICE_UNAVAILABLE),
        (_status_error(openai.InternalServerError, 500), 500, TRANSCRIPTION_FAILED),
        (openai.APIConnectionError(request=_OPENAI_REQUEST), 500, TRANSCRIPTION_FAILED),
    ],
)
def test_transcribe_provider_errors_are_mapped(error, status, message):
    resp = _client(_Provider(error=error)).post("/api/transcribe", json={"audio": AUDIO_B64}, headers=GOOD)
    assert resp.status_code == status  # nosec B101
    assert resp.json() == {"error": message}  # nosec B101


@pytest.mark.parametrize("transcript", ["", "   "])
def test_empty_transcript_is_400(transcript):
    resp = _client(_Provider(transcript=transcript)).post("/api/transcribe", json={"audio": AUDIO_B64}, headers=GOOD)
    assert resp.status_code == 400  # nosec B101
    assert resp.json() == {"error": NO_SPEECH}  # nosec B101


@pytest.mark.parametrize(
    "mime,ext",
    [
        ("audio/webm", "webm"),
        ("audio/webm;codecs=opus", "webm"),
        ("audio/mp4", "mp4"),
        ("audio/ogg; codecs=opus", "ogg"),
        ("AUDIO/WAV", "wav"),
        ("audio/x-m4a", "m4a"),
        ("video/unknown", "webm"),
        ("", "webm"),
    ],
)
def test_file_extension_for(mime, ext):
    assert file_extension_for(mime) == ext  # nosec B101
