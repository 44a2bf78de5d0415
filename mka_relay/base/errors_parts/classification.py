"""
Error classification helpers mapping HTTP statuses and transport exceptions
to :class:`RelayErrorKind` values.

The relay client inspects the response status before reading any body bytes;
``error_for_status`` is the single place that decides which kind a status maps
to. ``classify_exception`` covers failures raised while connecting or reading.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Optional

import httpx

from .error_kind import RelayErrorKind
from .relay_error import RelayError


_HTTP_STATUS_MAP: Dict[int, RelayErrorKind] = {
    401: RelayErrorKind.UNAUTHENTICATED,
    402: RelayErrorKind.PAYMENT_REQUIRED,
    429: RelayErrorKind.RATE_LIMITED,
}

_STATUS_MESSAGES: Dict[RelayErrorKind, str] = {
    RelayErrorKind.UNAUTHENTICATED: "relay rejected the credential",
    RelayErrorKind.PAYMENT_REQUIRED: "payment required",
    RelayErrorKind.RATE_LIMITED: "rate limits exceeded",
}


def _extract_status(exc: Exception) -> Optional[int]:
    """Return an HTTP status carried by ``exc`` (``exc.response.status_code``)."""
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def error_for_status(status_code: int, detail: Optional[str] = None) -> Optional[RelayError]:
    """Map a non-success HTTP status to a :class:`RelayError`.

    Returns ``None`` for 2xx statuses. Statuses without a dedicated kind map
    to ``UPSTREAM`` and keep the numeric status.
    """
    if 200 <= status_code < 300:
        return None
    kind = _HTTP_STATUS_MAP.get(status_code, RelayErrorKind.UPSTREAM)
    message = detail or _STATUS_MESSAGES.get(kind) or f"relay request failed with status {status_code}"
    return RelayError(kind=kind, message=message, status_code=status_code)


def classify_exception(exc: Exception) -> RelayError:
    """Classify an exception raised during a relay into a :class:`RelayError`.

    Precedence:
        1. RelayError passthrough.
        2. HTTP status errors (``httpx.HTTPStatusError``).
        3. Timeouts and transport errors → ``NETWORK``.
        4. Anything else → ``NETWORK`` with the exception text.
    """
    if isinstance(exc, RelayError):
        return exc
    status = _extract_status(exc)
    if status is not None:
        mapped = error_for_status(status, str(exc))
        if mapped is not None:
            mapped.raw = exc
            return mapped
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError, httpx.TimeoutException)):
        return RelayError(kind=RelayErrorKind.NETWORK, message="relay timed out", raw=exc)
    if isinstance(exc, httpx.TransportError):
        return RelayError(kind=RelayErrorKind.NETWORK, message=str(exc) or exc.__class__.__name__, raw=exc)
    return RelayError(
        kind=RelayErrorKind.NETWORK,
        message=str(exc) or exc.__class__.__name__,
        raw=exc,
    )


__all__ = [
    "classify_exception",
    "error_for_status",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
