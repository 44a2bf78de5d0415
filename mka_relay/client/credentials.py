"""Credential providers for the relay client.

The relay client asks its provider for a fresh access token before every
request; a provider returning ``None`` means the user is not signed in and the
relay fails with ``unauthenticated`` before any network call.
"""
from __future__ import annotations

import asyncio
from typing import Any, Optional, Protocol

from supabase import Client, create_client

from ..base.logging import get_logger, log_event
from ..config import get_section_config

_logger = get_logger("relay.credentials")


class CredentialProvider(Protocol):
    async def get_token(self) -> Optional[str]:
        """Return a bearer token for the relay proxy, or ``None``."""
        ...


class StaticCredentialProvider:
    """Fixed token (tests, service-to-service calls)."""

    def __init__(self, token: Optional[str]) -> None:
        self._token = token

    async def get_token(self) -> Optional[str]:
        return self._token


class SupabaseCredentialProvider:
    """Read the signed-in user's access token from a Supabase client session.

    The supabase client is synchronous, so the session lookup runs in a worker
    thread. ``get_session`` refreshes an expired session on its own.
    """

    def __init__(self, client: Optional[Any] = None) -> None:
        self._client: Any = client

    def _get_client(self) -> Client:
        if self._client is None:
            cfg = get_section_config("supabase")
            if not cfg.get("url") or not cfg.get("anon_key"):
                raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be configured")
            self._client = create_client(cfg["url"], cfg["anon_key"])
        return self._client

    async def get_token(self) -> Optional[str]:
        client = self._get_client()
        try:
            session = await asyncio.to_thread(client.auth.get_session)
        except Exception as exc:  # noqa: BLE001 - auth backend failures mean "signed out"
            log_event(_logger, "credentials.session_error", error=str(exc))
            return None
        token = getattr(session, "access_token", None) if session is not None else None
        return token or None


__all__ = ["CredentialProvider", "StaticCredentialProvider", "SupabaseCredentialProvider"]
