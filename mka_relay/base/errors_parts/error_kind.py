"""
Relay error kinds (taxonomy).

Defines the `RelayErrorKind` enumeration reported by the relay client. Values
are lowercase snake_case and are a stable public contract for logging and the
user-facing notification mapping.
"""
from __future__ import annotations

from enum import Enum


class RelayErrorKind(str, Enum):
    """Enumerated failure categories for a single relay attempt."""

    RATE_LIMITED = "rate_limited"
    PAYMENT_REQUIRED = "payment_required"
    UNAUTHENTICATED = "unauthenticated"
    UPSTREAM = "upstream"
    NETWORK = "network"


__all__ = ["RelayErrorKind"]
