"""Client side of the relay: relay client, speech dispatch and session."""

from .credentials import CredentialProvider, StaticCredentialProvider, SupabaseCredentialProvider
from .notifications import LoggingNotifier, Notification, Notifier, notification_for
from .relay_client import ChatRelayClient
from .session import ConversationSession, RelayResult
from .side_effects import SpeechDispatcher
from .speech import HttpSpeechClient, SpeechSynthesizer

__all__ = [
    "ChatRelayClient",
    "ConversationSession",
    "CredentialProvider",
    "HttpSpeechClient",
    "LoggingNotifier",
    "Notification",
    "Notifier",
    "RelayResult",
    "SpeechDispatcher",
    "SpeechSynthesizer",
    "StaticCredentialProvider",
    "SupabaseCredentialProvider",
    "notification_for",
]
