"""User-facing notifications for failed relays.

Each failed relay attempt produces exactly one notification; the text depends
only on the error kind.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Protocol, Tuple

from ..base.errors import RelayError, RelayErrorKind
from ..base.logging import get_logger, log_event


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: str = "destructive"


_GENERIC = ("Error", "Failed to get response from AI.")

_TEXTS: Dict[RelayErrorKind, Tuple[str, str]] = {
    RelayErrorKind.RATE_LIMITED: ("Rate Limit Exceeded", "Please try again in a moment."),
    RelayErrorKind.PAYMENT_REQUIRED: ("Payment Required", "Please add credits to continue using MKA AI."),
    RelayErrorKind.UNAUTHENTICATED: ("Authentication Required", "Please log in again."),
    RelayErrorKind.UPSTREAM: _GENERIC,
    RelayErrorKind.NETWORK: _GENERIC,
}


def notification_for(error: RelayError) -> Notification:
    title, description = _TEXTS.get(error.kind, _GENERIC)
    return Notification(title=title, description=description)


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None:
        ...


class LoggingNotifier:
    """Notifier that writes notifications to the relay log (headless use)."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_logger("relay.notify")

    def notify(self, notification: Notification) -> None:
        log_event(
            self._logger,
            "notify",
            level=logging.WARNING,
            title=notification.title,
            description=notification.description,
        )


__all__ = ["LoggingNotifier", "Notification", "Notifier", "notification_for"]
