"""Timeout configuration for relay HTTP traffic.

All network timeouts used by the relay client, the proxy's upstream client and
the speech clients derive from :func:`get_timeout_config`. Values are parsed
from the environment once and cached; the cache refreshes when the relevant
variables change so tests can adjust them with ``monkeypatch``.

Supported environment variables (all optional, positive floats):
    RELAY_TIMEOUT_CONNECT_SECONDS
    RELAY_TIMEOUT_READ_SECONDS    (idle time allowed between stream chunks)
    RELAY_TIMEOUT_HTTP_SECONDS    (non-streaming requests such as speech)
"""
from __future__ import annotations

from dataclasses import dataclass
import os

import httpx


_ENV_NAMES = (
    "RELAY_TIMEOUT_CONNECT_SECONDS",
    "RELAY_TIMEOUT_READ_SECONDS",
    "RELAY_TIMEOUT_HTTP_SECONDS",
)


@dataclass(frozen=True)
class TimeoutConfig:
    """Normalized timeout values in seconds.

    Attributes:
        connect_timeout_seconds: Time allowed to establish a connection.
        read_timeout_seconds: Idle time allowed between two stream chunks.
        http_timeout_seconds: Overall timeout for non-streaming requests.
    """

    connect_timeout_seconds: float = 10.0
    read_timeout_seconds: float = 120.0
    http_timeout_seconds: float = 60.0

    def for_stream(self) -> httpx.Timeout:
        """Timeout suitable for a long-lived streaming response."""
        return httpx.Timeout(
            self.http_timeout_seconds,
            connect=self.connect_timeout_seconds,
            read=self.read_timeout_seconds,
        )

    def for_request(self) -> httpx.Timeout:
        return httpx.Timeout(self.http_timeout_seconds, connect=self.connect_timeout_seconds)


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None


def _parse_env_float(name: str, default: float) -> float:
    """Read ``name`` as a positive float, falling back to ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`."""
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - module cache
    guard = "/".join(os.getenv(n, "") for n in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        connect_timeout_seconds=_parse_env_float(_ENV_NAMES[0], defaults.connect_timeout_seconds),
        read_timeout_seconds=_parse_env_float(_ENV_NAMES[1], defaults.read_timeout_seconds),
        http_timeout_seconds=_parse_env_float(_ENV_NAMES[2], defaults.http_timeout_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


__all__ = ["TimeoutConfig", "get_timeout_config"]
