"""
Speech proxy routes: ``POST /api/text-to-speech`` and ``POST /api/transcribe``.

Both routes require the same bearer credential as ``/api/chat`` and keep the
provider key on the server.

Transcription status mapping
----------------------------
- provider 400: 400 ``Invalid audio format. Please try recording again.``
- provider 401: 503 ``Transcription service unavailable. Please try again later.``
- empty transcript: 400 ``No speech detected. Please speak clearly and try again.``
- anything else: 500 ``Transcription failed. Please try again.``
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Dict

import openai
from fastapi import APIRouter, Depends, HTTPException, Request

from ..base.dto import TextToSpeechDTO, TranscribeDTO
from ..base.log_support import LogContext
from ..base.logging import get_logger, log_event
from .app_parts.app_core import get_speech_provider, read_json_body, require_user, validate_body
from .auth import AuthenticatedUser
from .speech_provider import OpenAISpeechProvider, SpeechNotConfigured

router = APIRouter()

_logger = get_logger("relay.proxy")

INVALID_AUDIO = "Invalid audio format. Please try recording again."
SERVICE_UNAVAILABLE = "Transcription service unavailable. Please try again later."
NO_SPEECH = "No speech detected. Please speak clearly and try again."
TRANSCRIPTION_FAILED = "Transcription failed. Please try again."


@router.post("/api/text-to-speech")
async def post_text_to_speech(
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
    provider: OpenAISpeechProvider = Depends(get_speech_provider),
) -> Dict[str, str]:
    """Return ``{"audioContent": <base64 mp3>}`` for ``{text, voice}``."""
    body = validate_body(TextToSpeechDTO, await read_json_body(request))
    ctx = LogContext(user_id=user.id)
    try:
        audio = await provider.synthesize(body.text, body.voice)
    except SpeechNotConfigured as exc:
        log_event(_logger, "proxy.speech_unconfigured", ctx, level=logging.ERROR)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except openai.OpenAIError as exc:
        log_event(_logger, "proxy.tts_error", ctx, level=logging.ERROR, error=str(exc))
        raise HTTPException(status_code=500, detail="Failed to generate speech") from exc
    log_event(_logger, "proxy.tts_done", ctx, chars=len(body.text), bytes=len(audio))
    return {"audioContent": base64.b64encode(audio).decode("ascii")}


@router.post("/api/transcribe")
async def post_transcribe(
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
    provider: OpenAISpeechProvider = Depends(get_speech_provider),
) -> Dict[str, str]:
    """Return ``{"text": ...}`` for ``{audio, mimeType}``."""
    body = validate_body(TranscribeDTO, await read_json_body(request))
    ctx = LogContext(user_id=user.id)
    try:
        audio = base64.b64decode(body.audio, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise HTTPException(status_code=400, detail="Audio data must be a base64 encoded string") from exc

    try:
        text = await provider.transcribe(audio, body.mime_type)
    except openai.BadRequestError as exc:
        log_event(_logger, "proxy.stt_error", ctx, level=logging.WARNING, status=400)
        raise HTTPException(status_code=400, detail=INVALID_AUDIO) from exc
    except openai.AuthenticationError as exc:
        log_event(_logger, "proxy.stt_error", ctx, level=logging.ERROR, status=401)
        raise HTTPException(status_code=503, detail=SERVICE_UNAVAILABLE) from exc
    except (openai.OpenAIError, SpeechNotConfigured) as exc:
        log_event(_logger, "proxy.stt_error", ctx, level=logging.ERROR, error=str(exc))
        raise HTTPException(status_code=500, detail=TRANSCRIPTION_FAILED) from exc

    if not text.strip():
        raise HTTPException(status_code=400, detail=NO_SPEECH)
    log_event(_logger, "proxy.stt_done", ctx, chars=len(text))
    return {"text": text}


__all__ = [
    "router",
    "INVALID_AUDIO",
    "NO_SPEECH",
    "SERVICE_UNAVAILABLE",
    "TRANSCRIPTION_FAILED",
]
