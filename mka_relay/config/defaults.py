"""Built-in defaults for the relay.

Centralizes models, base URLs, the proxy's system message and validation
limits so no other module hard-codes them.
"""

from __future__ import annotations

from typing import Tuple

# ---------------- Upstream completion provider ----------------
UPSTREAM_DEFAULT_BASE_URL = "https://ai.gateway.lovable.dev/v1"
UPSTREAM_DEFAULT_MODEL = "google/gemini-2.5-flash"
UPSTREAM_SYSTEM_MESSAGE = (
    "You are Kashif's AI, an advanced artificial intelligence assistant. "
    "You provide helpful, detailed, and thoughtful responses. You have "
    "capabilities for deep reasoning, code generation, and problem-solving "
    "across various domains."
)

# ---------------- Speech provider ----------------
SPEECH_TTS_MODEL = "tts-1"
SPEECH_STT_MODEL = "whisper-1"
SPEECH_AUDIO_FORMAT = "mp3"
SPEECH_VOICES: Tuple[str, ...] = ("alloy", "echo", "fable", "onyx", "nova", "shimmer")
SPEECH_DEFAULT_VOICE = "alloy"
SPEECH_DEFAULT_MIME = "audio/webm"

# ---------------- Validation limits ----------------
MAX_MESSAGES = 50
MAX_CONTENT_CHARS = 10_000
MAX_TTS_CHARS = 10_000
MAX_AUDIO_BYTES = 25 * 1024 * 1024

# ---------------- Client ----------------
CLIENT_DEFAULT_RELAY_BASE_URL = "http://127.0.0.1:8091"
CLIENT_MAX_PENDING_SPEECH = 4
CONVERSATION_TITLE_CHARS = 50

# ---------------- Service ----------------
SERVICE_DEFAULT_HOST = "127.0.0.1"
SERVICE_DEFAULT_PORT = 8091
SERVICE_CORS_ORIGINS: Tuple[str, ...] = ("*",)
SERVICE_CORS_HEADERS: Tuple[str, ...] = ("authorization", "x-client-info", "apikey", "content-type")

# ---------------- Persistence ----------------
DEFAULT_DB_PATH = "mka_relay.sqlite3"
SQLITE_PRAGMAS: Tuple[Tuple[str, str], ...] = (
    ("journal_mode", "WAL"),
    ("foreign_keys", "ON"),
    ("busy_timeout", "5000"),
)

__all__ = [
    "UPSTREAM_DEFAULT_BASE_URL",
    "UPSTREAM_DEFAULT_MODEL",
    "UPSTREAM_SYSTEM_MESSAGE",
    "SPEECH_TTS_MODEL",
    "SPEECH_STT_MODEL",
    "SPEECH_AUDIO_FORMAT",
    "SPEECH_VOICES",
    "SPEECH_DEFAULT_VOICE",
    "SPEECH_DEFAULT_MIME",
    "MAX_MESSAGES",
    "MAX_CONTENT_CHARS",
    "MAX_TTS_CHARS",
    "MAX_AUDIO_BYTES",
    "CLIENT_DEFAULT_RELAY_BASE_URL",
    "CLIENT_MAX_PENDING_SPEECH",
    "CONVERSATION_TITLE_CHARS",
    "SERVICE_DEFAULT_HOST",
    "SERVICE_DEFAULT_PORT",
    "SERVICE_CORS_ORIGINS",
    "SERVICE_CORS_HEADERS",
    "DEFAULT_DB_PATH",
    "SQLITE_PRAGMAS",
]
