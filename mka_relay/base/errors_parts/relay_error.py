"""
Structured relay error exception type.

Wraps transport and HTTP failures of a relay attempt with a normalized
`RelayErrorKind` so the conversation layer can surface exactly one
notification per failure.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_kind import RelayErrorKind


@dataclass
class RelayError(Exception):
    """Represents a failed relay attempt.

    Attributes:
        kind: Normalized :class:`RelayErrorKind` for the failure.
        message: Human-readable error message suitable for logging.
        status_code: HTTP status returned by the proxy, when one was received.
        raw: Optional original exception for diagnostics.
    """

    kind: RelayErrorKind
    message: str
    status_code: Optional[int] = None
    raw: Optional[Exception] = None

    @property
    def retryable(self) -> bool:
        """Whether a user-initiated retry may succeed without other action."""
        return self.kind in (RelayErrorKind.RATE_LIMITED, RelayErrorKind.NETWORK, RelayErrorKind.UPSTREAM)

    def __str__(self) -> str:  # pragma: no cover - trivial
        status = f" ({self.status_code})" if self.status_code is not None else ""
        return f"{self.kind.value}{status}: {self.message}"


class RelayBusyError(RuntimeError):
    """Raised when a send is attempted while a relay is already in flight."""


__all__ = ["RelayError", "RelayBusyError"]
