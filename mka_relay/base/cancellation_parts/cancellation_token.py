"""Cooperative cancellation token.

A conversation owns one scope token for its lifetime; every relay runs under a
child of it. Cancelling the scope (conversation switch or reset) cascades to
the child, which the relay client polls between chunk reads. Callbacks let the
client abort a read that is currently awaiting bytes.
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, List

from .cancelled_error import CancelledError
from .state import State

CancelCallback = Callable[[str | None], None]


class CancellationToken:
    """A cancellation token with cascading children and cancel callbacks.

    Thread-safe for ``cancel`` / ``raise_if_cancelled`` / ``add_callback``.
    Callbacks run outside the lock, once, in registration order.
    """

    def __init__(self, *, parent: "CancellationToken | None" = None) -> None:
        self._state = State()
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        self._callbacks: List[CancelCallback] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:
        return self._state.cancelled

    @property
    def reason(self) -> str | None:
        return self._state.reason

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation, run callbacks, and cascade to children."""
        with self._lock:
            if self._state.cancelled:
                return
            self._state.cancelled = True
            self._state.reason = reason
            children = list(self._children)
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for cb in callbacks:
            cb(reason)
        for child in children:
            child.cancel(reason)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._state.cancelled
            reason = self._state.reason
        if should_cancel:
            token.cancel(reason)
        return token

    def child(self) -> "CancellationToken":
        return CancellationToken(parent=self)

    def add_callback(self, callback: CancelCallback) -> Callable[[], None]:
        """Register ``callback`` to run on cancellation; returns an unregister function.

        If the token is already cancelled the callback runs immediately.
        """
        with self._lock:
            already = self._state.cancelled
            if not already:
                self._callbacks.append(callback)
        if already:
            callback(self._state.reason)

        def _remove() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return _remove

    def raise_if_cancelled(self) -> None:
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "relay cancelled")

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, children={len(self._children)})"
        )


__all__ = ["CancellationToken", "CancelCallback"]
