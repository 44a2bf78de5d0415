"""Pytest configuration for the relay test suite.

Provides event-stream builders shared by the streaming, client and proxy
tests, isolates configuration from the developer's environment, and captures
structured log lines from the shared ``relay`` logger.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Iterator, List

import pytest

from mka_relay.base.logging import get_logger
from mka_relay.config import reset_config_cache

_ISOLATED_ENV = (
    "UPSTREAM_API_KEY",
    "LOVABLE_API_KEY",
    "UPSTREAM_MODEL",
    "UPSTREAM_BASE_URL",
    "SPEECH_API_KEY",
    "OPENAI_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "CLIENT_RELAY_BASE_URL",
    "CLIENT_VOICE_ENABLED",
    "RELAY_CONFIG_FILE",
    "RELAY_LOG_LEVEL",
)


def delta_line(text: str) -> str:
    """One ``data:`` line carrying a content delta."""
    payload = {"choices": [{"index": 0, "delta": {"content": text}}]}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n"


def event_body(*texts: str, done: bool = True) -> bytes:
    """Encode deltas (and the terminator) the way the upstream gateway does."""
    lines = [": keep-alive\n", 'data: {"choices":[{"delta":{"role":"assistant"}}]}\n']
    lines.extend(delta_line(t) for t in texts)
    if done:
        lines.append("data: [DONE]\n")
    return "".join(lines).encode("utf-8")


def chunked(data: bytes, size: int) -> List[bytes]:
    return [data[i:i + size] for i in range(0, len(data), size)]


@pytest.fixture()
def make_delta_line() -> Callable[[str], str]:
    return delta_line


@pytest.fixture()
def make_event_body() -> Callable[..., bytes]:
    return event_body


@pytest.fixture()
def split_chunks() -> Callable[[bytes, int], List[bytes]]:
    return chunked


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Run each test without the caller's .env, config file or relay env vars."""
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "missing.env"))
    reset_config_cache()
    yield
    reset_config_cache()


class _JsonCollector(logging.Handler):
    """Collect ``log_event`` payloads as dicts."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.events: List[Dict[str, Any]] = []

    def emit(self, record: logging.LogRecord) -> None:
        try:
            payload = json.loads(record.getMessage())
        except ValueError:
            return
        if isinstance(payload, dict):
            self.events.append(payload)


@pytest.fixture()
def log_events() -> Iterator[List[Dict[str, Any]]]:
    """Structured events logged under ``relay`` during the test."""
    logger = get_logger()
    handler = _JsonCollector()
    previous = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield handler.events
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous)
