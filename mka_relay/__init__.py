"""mka_relay package

Streaming chat relay for the MKA AI assistant.

Purpose:
    Relay a conversation from the client through a backend proxy to an
    upstream language model and render the streamed reply incrementally.

Public API (re-exported):
    - Version: ``__version__``
    - Errors: :class:`RelayError`, :class:`RelayErrorKind`, :class:`RelayBusyError`
    - Models: :class:`Message`, :class:`FileRef`
    - Streaming core: :class:`TransportDecoder`, :class:`EventParser`,
      :class:`EventStreamReader`, :class:`MessageAccumulator`
    - Client: :class:`ChatRelayClient`, :class:`SpeechDispatcher`,
      :class:`ConversationSession`

The FastAPI proxy lives in :mod:`mka_relay.service.app` and is not imported
here so client-only installs stay light at import time.
"""

from .base.cancellation import CancellationToken, CancelledError
from .base.errors import RelayBusyError, RelayError, RelayErrorKind
from .base.models import FileRef, Message
from .base.streaming import EventParser, EventStreamReader, MessageAccumulator, TransportDecoder
from .client import ChatRelayClient, ConversationSession, SpeechDispatcher

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CancellationToken",
    "CancelledError",
    "ChatRelayClient",
    "ConversationSession",
    "EventParser",
    "EventStreamReader",
    "FileRef",
    "Message",
    "MessageAccumulator",
    "RelayBusyError",
    "RelayError",
    "RelayErrorKind",
    "SpeechDispatcher",
    "TransportDecoder",
]
