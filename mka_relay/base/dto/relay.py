"""
Pydantic DTOs for requests accepted by the relay proxy.

Purpose
-------
Validate inbound JSON bodies for ``/api/chat``, ``/api/text-to-speech`` and
``/api/transcribe`` before anything is forwarded upstream. Each check raises a
``PydanticCustomError`` whose message is the exact client-facing error text,
so the controller edge can return ``{"error": first_error_message}`` with a
400 status.

Ordering
--------
Request-level checks run in a ``mode="before"`` validator and stop field
validation on failure. Per-message checks run role first, then content, and
pydantic reports list items in index order, so the first reported error is
the first failing check of the first bad message.

External dependencies: Pydantic only (no network calls).
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator
from pydantic_core import PydanticCustomError

from ...config.defaults import (
    MAX_AUDIO_BYTES,
    MAX_CONTENT_CHARS,
    MAX_MESSAGES,
    MAX_TTS_CHARS,
    SPEECH_DEFAULT_MIME,
    SPEECH_DEFAULT_VOICE,
    SPEECH_VOICES,
)
from ..models import ROLES


def _fail(message: str) -> PydanticCustomError:
    return PydanticCustomError("relay_validation", message)


class RelayMessageDTO(BaseModel):
    """One chat message as forwarded upstream.

    Whitespace-only content is accepted; only empty or non-string content is
    rejected.
    """

    model_config = ConfigDict(extra="ignore")

    role: str
    content: str

    @model_validator(mode="before")
    @classmethod
    def _validate_message(cls, data: Any) -> Any:
        role = data.get("role") if isinstance(data, dict) else None
        if not isinstance(role, str) or role not in ROLES:
            raise _fail("Invalid message role. Must be user, assistant, or system")
        content = data.get("content")
        if not isinstance(content, str) or content == "":
            raise _fail("Message content must be a non-empty string")
        if len(content) > MAX_CONTENT_CHARS:
            raise _fail("Message content cannot exceed 10,000 characters")
        return data


class RelayRequestDTO(BaseModel):
    """Body of ``POST /api/chat``: ``{"messages": [...]}``."""

    model_config = ConfigDict(extra="ignore")

    messages: List[RelayMessageDTO]

    @model_validator(mode="before")
    @classmethod
    def _validate_envelope(cls, data: Any) -> Any:
        messages = data.get("messages") if isinstance(data, dict) else None
        if not isinstance(messages, list):
            raise _fail("Messages must be an array")
        if not messages:
            raise _fail("Messages array cannot be empty")
        if len(messages) > MAX_MESSAGES:
            raise _fail("Messages array cannot exceed 50 messages")
        return data

    def to_upstream(self) -> List[Dict[str, str]]:
        return [{"role": m.role, "content": m.content} for m in self.messages]


class TextToSpeechDTO(BaseModel):
    """Body of ``POST /api/text-to-speech``; ``voice`` defaults to alloy."""

    model_config = ConfigDict(extra="ignore")

    text: str
    voice: str = SPEECH_DEFAULT_VOICE

    @model_validator(mode="before")
    @classmethod
    def _validate_tts(cls, data: Any) -> Any:
        text = data.get("text") if isinstance(data, dict) else None
        if not isinstance(text, str) or text == "":
            raise _fail("Text must be a non-empty string")
        if len(text) > MAX_TTS_CHARS:
            raise _fail("Text cannot exceed 10,000 characters")
        voice = data.get("voice") or SPEECH_DEFAULT_VOICE
        if voice not in SPEECH_VOICES:
            raise _fail(f"Invalid voice. Must be one of: {', '.join(SPEECH_VOICES)}")
        return {"text": text, "voice": voice}


class TranscribeDTO(BaseModel):
    """Body of ``POST /api/transcribe``: base64 ``audio`` plus ``mimeType``."""

    model_config = ConfigDict(extra="ignore")

    audio: str
    mime_type: str = SPEECH_DEFAULT_MIME

    @model_validator(mode="before")
    @classmethod
    def _validate_audio(cls, data: Any) -> Any:
        audio = data.get("audio") if isinstance(data, dict) else None
        if not isinstance(audio, str) or audio == "":
            raise _fail("Audio data must be a base64 encoded string")
        if len(audio) * 0.75 > MAX_AUDIO_BYTES:
            raise _fail("Audio file size cannot exceed 25MB")
        mime = data.get("mimeType") or SPEECH_DEFAULT_MIME
        if not isinstance(mime, str):
            mime = SPEECH_DEFAULT_MIME
        return {"audio": audio, "mime_type": mime}


def first_error_message(exc: ValidationError) -> str:
    """Return the message of the first validation error in ``exc``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    return str(errors[0].get("msg") or "Invalid request")


__all__ = [
    "RelayMessageDTO",
    "RelayRequestDTO",
    "TextToSpeechDTO",
    "TranscribeDTO",
    "first_error_message",
]
