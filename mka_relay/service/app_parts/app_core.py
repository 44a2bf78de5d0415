"""Shared dependencies and helpers for the relay proxy routes.

Every collaborator a route talks to is provided by a dependency function in
this module so tests can swap it through ``app.dependency_overrides``:

- :func:`get_authenticator` - bearer token validation (Supabase)
- :func:`get_upstream` - upstream chat-completion client
- :func:`get_speech_provider` - OpenAI speech provider

:func:`require_user` runs before any body parsing, so an unauthenticated
request is rejected with 401 regardless of what it carries.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Type, TypeVar

from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel, ValidationError

from ...base.dto import first_error_message
from ...base.logging import get_logger, log_event
from ..auth import (
    AuthBackendNotConfigured,
    AuthenticatedUser,
    Authenticator,
    SupabaseAuthenticator,
    extract_bearer,
)
from ..speech_provider import OpenAISpeechProvider
from ..upstream import UpstreamCompletionClient

UNAUTHORIZED_MESSAGE = "Unauthorized - Please log in"

_logger = get_logger("relay.proxy")

DTO = TypeVar("DTO", bound=BaseModel)


@lru_cache(maxsize=1)
def get_authenticator() -> Authenticator:
    """FastAPI dependency returning the process-wide authenticator."""
    return SupabaseAuthenticator()


def get_upstream() -> UpstreamCompletionClient:
    """FastAPI dependency returning an upstream client built from config."""
    return UpstreamCompletionClient.from_config()


@lru_cache(maxsize=1)
def get_speech_provider() -> OpenAISpeechProvider:
    return OpenAISpeechProvider()


async def require_user(
    request: Request,
    authenticator: Authenticator = Depends(get_authenticator),
) -> AuthenticatedUser:
    """Resolve the caller or fail with 401 ``Unauthorized - Please log in``."""
    token = extract_bearer(request.headers.get("authorization"))
    if token is None:
        raise HTTPException(status_code=401, detail=UNAUTHORIZED_MESSAGE)
    try:
        user = await authenticator.authenticate(token)
    except AuthBackendNotConfigured as exc:
        log_event(_logger, "proxy.auth_unconfigured", error=str(exc))
        raise HTTPException(status_code=500, detail="Authentication backend is not configured") from exc
    if user is None:
        raise HTTPException(status_code=401, detail=UNAUTHORIZED_MESSAGE)
    return user


async def read_json_body(request: Request) -> Any:
    """Return the decoded JSON body; 400 when it is not JSON."""
    try:
        return await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Request body must be valid JSON") from exc


def validate_body(model: Type[DTO], data: Any) -> DTO:
    """Validate ``data`` into ``model``; 400 with the first error message."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=first_error_message(e)) from e


__all__ = [
    "UNAUTHORIZED_MESSAGE",
    "get_authenticator",
    "get_speech_provider",
    "get_upstream",
    "read_json_body",
    "require_user",
    "validate_body",
]
