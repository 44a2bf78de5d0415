"""Speech provider backed by the OpenAI SDK.

Wraps ``AsyncOpenAI`` for text-to-speech (``tts-1``, mp3) and Whisper
transcription. The SDK client is created on first use so a missing key only
fails the speech routes, never application start-up.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from openai import AsyncOpenAI

from ..base.timeouts import get_timeout_config
from ..config import get_section_config
from ..config.defaults import SPEECH_AUDIO_FORMAT

# MIME type → file extension understood by the transcription API.
_MIME_TO_EXT: Dict[str, str] = {
    "audio/webm": "webm",
    "audio/webm;codecs=opus": "webm",
    "audio/mp4": "mp4",
    "audio/mp4;codecs=mp4a.40.2": "mp4",
    "audio/aac": "aac",
    "audio/mpeg": "mp3",
    "audio/ogg": "ogg",
    "audio/ogg;codecs=opus": "ogg",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/flac": "flac",
    "audio/x-m4a": "m4a",
}
DEFAULT_EXTENSION = "webm"


class SpeechNotConfigured(RuntimeError):
    """Raised when no speech API key is available."""


def file_extension_for(mime_type: str) -> str:
    """Map a recorder MIME type to a file extension.

    Exact match first, then the base type before ``;``, then ``webm``.
    """
    normalized = (mime_type or "").lower().strip()
    if normalized in _MIME_TO_EXT:
        return _MIME_TO_EXT[normalized]
    base = normalized.split(";", 1)[0].strip()
    return _MIME_TO_EXT.get(base, DEFAULT_EXTENSION)


class OpenAISpeechProvider:
    """Text-to-speech and speech-to-text through ``AsyncOpenAI``."""

    def __init__(self, *, client: Optional[Any] = None, overrides: Optional[Dict[str, Any]] = None) -> None:
        self._client = client
        self._cfg = get_section_config("speech", overrides)

    def _get_client(self) -> Any:
        if self._client is None:
            api_key = self._cfg.get("api_key")
            if not api_key:
                raise SpeechNotConfigured("SPEECH_API_KEY is not configured")
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=self._cfg.get("base_url") or None,
                timeout=get_timeout_config().http_timeout_seconds,
            )
        return self._client

    async def synthesize(self, text: str, voice: str) -> bytes:
        """Return mp3 bytes for ``text`` spoken with ``voice``."""
        resp = await self._get_client().audio.speech.create(
            model=self._cfg["tts_model"],
            voice=voice,
            input=text,
            response_format=SPEECH_AUDIO_FORMAT,
        )
        return resp.content

    async def transcribe(self, audio: bytes, mime_type: str) -> str:
        """Return the transcript of ``audio`` (may be empty)."""
        filename = f"audio.{file_extension_for(mime_type)}"
        result = await self._get_client().audio.transcriptions.create(
            model=self._cfg["stt_model"],
            file=(filename, audio, mime_type),
        )
        return getattr(result, "text", "") or ""


__all__ = [
    "DEFAULT_EXTENSION",
    "OpenAISpeechProvider",
    "SpeechNotConfigured",
    "file_extension_for",
]
