"""Tests for bearer extraction, the Supabase authenticator and require_user."""
from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from mka_relay.service.app import create_app
from mka_relay.service.app_parts.app_core import get_authenticator
from mka_relay.service.auth import (
    AuthBackendNotConfigured,
    AuthenticatedUser,
    SupabaseAuthenticator,
    extract_bearer,
)


@pytest.mark.parametrize(
    "header,token",
    [
        ("Bearer abc.def", "abc.def"),
        ("bearer   abc  ", "abc"),
        ("Bearer ", None),
        ("Basic Zm9vOmJhcg==", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_bearer(header, token):
    assert extract_bearer(header) == token  # nosec B101


class _FakeAuth:
    def __init__(self, user=None, error: Exception | None = None) -> None:
        self.user = user
        self.error = error
        self.tokens = []

    def get_user(self, token: str):
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(user=self.user)


@pytest.mark.asyncio
async def test_supabase_authenticator_returns_user():
    auth = _FakeAuth(user=SimpleNamespace(id="u-42", email="kashif@example.com"))
    user = await SupabaseAuthenticator(SimpleNamespace(auth=auth)).authenticate("jwt")
    assert user == AuthenticatedUser(id="u-42", email="kashif@example.com")  # nosec B101
    assert auth.tokens == ["jwt"]  # nosec B101


@pytest.mark.asyncio
async def test_supabase_authenticator_rejection_is_none():
    auth = _FakeAuth(error=RuntimeError("invalid JWT"))
    assert await SupabaseAuthenticator(SimpleNamespace(auth=auth)).authenticate("jwt") is None  # nosec B101


@pytest.mark.asyncio
async def test_supabase_authenticator_without_user_is_none():
    auth = _FakeAuth(user=None)
    assert await SupabaseAuthenticator(SimpleNamespace(auth=auth)).authenticate("jwt") is None  # nosec B101


@pytest.mark.asyncio
async def test_supabase_authenticator_requires_configuration():
    with pytest.raises(AuthBackendNotConfigured):
        await SupabaseAuthenticator().authenticate("jwt")


def test_unconfigured_auth_backend_is_500():
    get_authenticator.cache_clear()
    try:
        resp = TestClient(create_app()).post(
            "/api/chat",
            json={"messages": [{"role": "user", "content": "hi"}]},
            headers={"Authorization": "Bearer something"},
        )
    finally:
        get_authenticator.cache_clear()
    assert resp.status_code == 500  # nosec B101
    assert resp.json() == {"error": "Authentication backend is not configured"}  # nosec B101
