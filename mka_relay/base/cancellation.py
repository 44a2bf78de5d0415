"""Cooperative cancellation primitives (public API facade).

Exposes ``CancellationToken`` and ``CancelledError`` from the canonical
``mka_relay.base.cancellation`` path; implementations live under
``cancellation_parts``.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancelCallback, CancellationToken

__all__ = ["CancellationToken", "CancelledError", "CancelCallback"]
