"""Shared async HTTP client pool.

Purpose:
    Provide a pool of reusable ``httpx.AsyncClient`` instances so the relay
    client, the proxy's upstream client and the speech clients share
    connections instead of allocating one client per call. Timeouts derive
    from :func:`get_timeout_config`.

Lifecycle & cleanup:
    - Clients are cached by ``(base_url, purpose)``. Purposes keep distinct
      pools apart (e.g. ``"relay"`` vs ``"speech"``).
    - Async clients cannot be closed from an ``atexit`` hook; applications
      call :func:`aclose_all_clients` on shutdown (the FastAPI app does so in
      its lifespan) and tests call it in teardown.
"""

from __future__ import annotations

import threading
from typing import Dict, Optional, Tuple

import httpx

from ..logging import get_logger, log_event
from ..timeouts import get_timeout_config

_CLIENTS: Dict[Tuple[Optional[str], str], httpx.AsyncClient] = {}
_LOCK = threading.RLock()
_logger = get_logger("relay.http")


def get_async_client(base_url: Optional[str], purpose: str) -> httpx.AsyncClient:
    """Return a pooled ``httpx.AsyncClient`` for ``base_url`` and ``purpose``.

    The first request for a key creates the client with the streaming timeout
    profile; later requests reuse it. Closed clients are replaced.
    """
    key = (base_url, purpose)
    client = _CLIENTS.get(key)
    if client is not None and not client.is_closed:
        return client

    with _LOCK:
        client = _CLIENTS.get(key)
        if client is not None and not client.is_closed:
            return client
        timeout = get_timeout_config().for_stream()
        client = httpx.AsyncClient(base_url=base_url, timeout=timeout) if base_url else httpx.AsyncClient(timeout=timeout)
        _CLIENTS[key] = client
        return client


async def aclose_all_clients() -> None:
    """Close and clear all pooled clients."""
    with _LOCK:
        clients = list(_CLIENTS.values())
        _CLIENTS.clear()
    for c in clients:
        try:
            await c.aclose()
        except (httpx.HTTPError, RuntimeError) as exc:
            log_event(_logger, "http.close_failed", error=str(exc))


__all__ = ["get_async_client", "aclose_all_clients"]
