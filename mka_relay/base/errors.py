"""Relay error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``mka_relay.base.errors_parts`` to keep a stable import path.
"""

from .errors_parts.error_kind import RelayErrorKind
from .errors_parts.relay_error import RelayBusyError, RelayError
from .errors_parts.classification import classify_exception, error_for_status

__all__ = ["RelayErrorKind", "RelayError", "RelayBusyError", "classify_exception", "error_for_status"]
