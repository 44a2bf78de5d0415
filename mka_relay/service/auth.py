"""Bearer-token authentication for the relay proxy.

The proxy never stores sessions. Every request carries the user's access
token, which an :class:`Authenticator` exchanges for the user record. The
Supabase implementation asks the auth backend (``auth.get_user(token)``), which
validates the signature and expiry.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional, Protocol

from starlette.concurrency import run_in_threadpool
from supabase import Client, create_client

from ..base.logging import get_logger, log_event
from ..config import get_section_config

_logger = get_logger("relay.auth")

BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: Optional[str] = None


class Authenticator(Protocol):
    async def authenticate(self, token: str) -> Optional[AuthenticatedUser]:
        """Return the user for ``token`` or ``None`` when it is rejected."""
        ...


class AuthBackendNotConfigured(RuntimeError):
    """Raised when the Supabase URL or anon key is missing."""


def extract_bearer(header: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not header or not header.lower().startswith(BEARER_PREFIX):
        return None
    token = header[len(BEARER_PREFIX):].strip()
    return token or None


class SupabaseAuthenticator:
    """Validate access tokens against Supabase Auth."""

    def __init__(self, client: Optional[Any] = None) -> None:
        self._client: Any = client

    def _get_client(self) -> Client:
        if self._client is None:
            cfg = get_section_config("supabase")
            if not cfg.get("url") or not cfg.get("anon_key"):
                raise AuthBackendNotConfigured("SUPABASE_URL and SUPABASE_ANON_KEY must be configured")
            self._client = create_client(cfg["url"], cfg["anon_key"])
        return self._client

    async def authenticate(self, token: str) -> Optional[AuthenticatedUser]:
        client = self._get_client()
        try:
            resp = await run_in_threadpool(client.auth.get_user, token)
        except Exception as exc:  # noqa: BLE001 - any auth backend rejection means 401
            log_event(_logger, "auth.rejected", level=logging.INFO, error=type(exc).__name__)
            return None
        user = getattr(resp, "user", None) if resp is not None else None
        if user is None or not getattr(user, "id", None):
            return None
        return AuthenticatedUser(id=str(user.id), email=getattr(user, "email", None))


__all__ = [
    "AuthBackendNotConfigured",
    "AuthenticatedUser",
    "Authenticator",
    "SupabaseAuthenticator",
    "extract_bearer",
]
