"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `mka_relay.base.errors` for the stable surface.
"""

from .error_kind import RelayErrorKind
from .relay_error import RelayBusyError, RelayError
from .classification import classify_exception, error_for_status

__all__ = ["RelayErrorKind", "RelayError", "RelayBusyError", "classify_exception", "error_for_status"]
