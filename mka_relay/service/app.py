"""FastAPI application for the relay proxy.

Routes:
    GET  /api/health
    POST /api/chat             (streaming relay)
    POST /api/text-to-speech
    POST /api/transcribe

Errors raised as ``HTTPException`` are rendered as ``{"error": detail}`` so
every non-stream response has the same shape.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..base.http import aclose_all_clients
from ..config import get_section_config
from ..config.defaults import SERVICE_CORS_HEADERS
from . import chat_stream, speech


@asynccontextmanager
async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
    yield
    await aclose_all_clients()


def create_app() -> FastAPI:
    """Build a configured application instance."""
    application = FastAPI(title="MKA Relay", version="0.1.0", lifespan=_lifespan)

    cfg = get_section_config("service")
    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.get("cors_origins") or ["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=list(SERVICE_CORS_HEADERS),
    )

    @application.exception_handler(StarletteHTTPException)
    async def _http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))

    @application.get("/api/health")
    def health() -> Dict[str, Any]:
        """Report that the service is up."""
        return {"ok": True}

    application.include_router(chat_stream.router)
    application.include_router(speech.router)
    return application


app = create_app()


__all__ = ["app", "create_app"]
