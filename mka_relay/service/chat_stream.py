"""
Relay proxy route: ``POST /api/chat``.

Purpose
-------
Authenticate the caller, validate the conversation, forward it to the
upstream gateway with streaming enabled, and pass the upstream event stream
back unmodified as ``text/event-stream``.

Status mapping
--------------
- 401: missing or rejected bearer token (checked before the body is read)
- 400: validation failure, ``{"error": <first failing check>}``
- upstream 429 / 402: same status with a user-facing message
- any other upstream failure, or no upstream key: 500

Pass-through
------------
The body is relayed with ``aiter_raw`` so no byte is re-encoded or re-framed;
the upstream connection closes when the response finishes (background task).
"""

from __future__ import annotations

import logging
from typing import Dict

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from ..base.dto import RelayRequestDTO
from ..base.log_support import LogContext
from ..base.logging import get_logger, log_event
from .app_parts.app_core import get_upstream, read_json_body, require_user, validate_body
from .auth import AuthenticatedUser
from .upstream import UpstreamCompletionClient, UpstreamNotConfigured

router = APIRouter()

_logger = get_logger("relay.proxy")

GATEWAY_ERROR = "AI gateway error"

_UPSTREAM_STATUS_ERRORS: Dict[int, str] = {
    429: "Rate limits exceeded, please try again later.",
    402: "Payment required, please add funds to your Lovable AI workspace.",
}


@router.post("/api/chat")
async def post_chat(
    request: Request,
    user: AuthenticatedUser = Depends(require_user),
    upstream: UpstreamCompletionClient = Depends(get_upstream),
) -> StreamingResponse:
    """Stream an assistant reply for ``{"messages": [...]}``."""
    body = validate_body(RelayRequestDTO, await read_json_body(request))
    ctx = LogContext(user_id=user.id, model=upstream.model)
    log_event(_logger, "proxy.chat_request", ctx, messages=len(body.messages))

    try:
        resp = await upstream.open_stream(body.to_upstream())
    except UpstreamNotConfigured as exc:
        log_event(_logger, "proxy.upstream_unconfigured", ctx, level=logging.ERROR)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except httpx.HTTPError as exc:
        log_event(_logger, "proxy.upstream_unreachable", ctx, level=logging.ERROR, error=str(exc))
        raise HTTPException(status_code=500, detail=GATEWAY_ERROR) from exc

    if not resp.is_success:
        detail = await resp.aread()
        await resp.aclose()
        log_event(
            _logger,
            "proxy.upstream_error",
            ctx,
            level=logging.WARNING,
            status=resp.status_code,
            body=detail[:500].decode("utf-8", errors="replace"),
        )
        if resp.status_code in _UPSTREAM_STATUS_ERRORS:
            raise HTTPException(status_code=resp.status_code, detail=_UPSTREAM_STATUS_ERRORS[resp.status_code])
        raise HTTPException(status_code=500, detail=GATEWAY_ERROR)

    log_event(_logger, "proxy.stream_open", ctx)
    return StreamingResponse(
        resp.aiter_raw(),
        media_type="text/event-stream",
        background=BackgroundTask(resp.aclose),
    )


__all__ = ["router", "post_chat", "GATEWAY_ERROR"]
