"""Cancellation error type.

Raised by relay operations that observe a cancelled token, so a conversation
switch can be told apart from a real failure (no user notification).
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when a relay is cancelled cooperatively."""


__all__ = ["CancelledError"]
