from .cancelled_error import CancelledError
from .cancellation_token import CancelCallback, CancellationToken

__all__ = ["CancellationToken", "CancelledError", "CancelCallback"]
