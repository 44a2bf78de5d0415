"""Client for the relay's speech endpoints.

``HttpSpeechClient`` implements the :class:`SpeechSynthesizer` protocol used
by the post-stream dispatcher and also exposes transcription for voice input.
Both calls carry the same bearer credential as the chat relay.
"""
from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

import httpx

from ..base.errors import RelayError, RelayErrorKind, classify_exception, error_for_status
from ..base.http import get_async_client
from ..base.timeouts import get_timeout_config
from .credentials import CredentialProvider


class SpeechSynthesizer(Protocol):
    async def synthesize(self, text: str, voice: str) -> str:
        """Return base64 encoded audio for ``text``."""
        ...


class HttpSpeechClient:
    """Call ``/api/text-to-speech`` and ``/api/transcribe`` on the relay."""

    def __init__(
        self,
        relay_base_url: str,
        credentials: CredentialProvider,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = relay_base_url.rstrip("/")
        self._credentials = credentials
        self._client = http_client

    def _http(self) -> httpx.AsyncClient:
        return self._client or get_async_client(None, "speech")

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        token = await self._credentials.get_token()
        if not token:
            raise RelayError(kind=RelayErrorKind.UNAUTHENTICATED, message="no credential available")
        try:
            resp = await self._http().post(
                f"{self._base_url}{path}",
                json=payload,
                headers={"Authorization": f"Bearer {token}"},
                timeout=get_timeout_config().for_request(),
            )
        except httpx.HTTPError as exc:
            raise classify_exception(exc) from exc
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}
        err = error_for_status(resp.status_code, data.get("error"))
        if err is not None:
            raise err
        return data

    async def synthesize(self, text: str, voice: str) -> str:
        data = await self._post("/api/text-to-speech", {"text": text, "voice": voice})
        audio = data.get("audioContent")
        if not isinstance(audio, str) or not audio:
            raise RelayError(kind=RelayErrorKind.UPSTREAM, message="speech response missing audioContent")
        return audio

    async def transcribe(self, audio: str, mime_type: str = "audio/webm") -> str:
        data = await self._post("/api/transcribe", {"audio": audio, "mimeType": mime_type})
        return str(data.get("text") or "")


__all__ = ["HttpSpeechClient", "SpeechSynthesizer"]
