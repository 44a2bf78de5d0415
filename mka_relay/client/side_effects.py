"""Post-stream side effects (speech synthesis of the finished reply).

The dispatcher runs after a relay completed successfully. Speech synthesis is
detached: the relay result is already final and a failing or slow speech call
never changes it. Failures are logged only.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Set

from ..base.logging import get_logger, log_event
from ..base.models import Message
from ..config.defaults import CLIENT_MAX_PENDING_SPEECH, SPEECH_DEFAULT_VOICE
from .speech import SpeechSynthesizer

AudioCallback = Callable[[Message], None]

_logger = get_logger("relay.speech")


class SpeechDispatcher:
    """Schedule speech synthesis for finished assistant messages.

    At most ``max_pending`` synthesis tasks run at once; further dispatches
    are skipped with a log line rather than queued.
    """

    def __init__(
        self,
        synthesizer: SpeechSynthesizer,
        *,
        enabled: bool = True,
        voice: str = SPEECH_DEFAULT_VOICE,
        max_pending: int = CLIENT_MAX_PENDING_SPEECH,
    ) -> None:
        self._synthesizer = synthesizer
        self.enabled = enabled
        self.voice = voice
        self._max_pending = max(1, max_pending)
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def dispatch(self, message: Message, on_audio: Optional[AudioCallback] = None) -> Optional[asyncio.Task]:
        """Schedule synthesis of ``message``; returns the task or ``None`` if skipped."""
        if not self.enabled or not message.content.strip():
            return None
        if len(self._pending) >= self._max_pending:
            log_event(_logger, "speech.skipped", level=logging.WARNING, pending=len(self._pending))
            return None
        task = asyncio.get_running_loop().create_task(self._run(message, on_audio))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(self, message: Message, on_audio: Optional[AudioCallback]) -> None:
        try:
            audio = await self._synthesizer.synthesize(message.content, self.voice)
            if on_audio is not None:
                on_audio(message.with_audio(audio))
            log_event(_logger, "speech.done", chars=len(message.content))
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001 - speech failures never reach the relay result
            log_event(_logger, "speech.error", level=logging.WARNING, error=str(exc), type=type(exc).__name__)

    async def drain(self) -> None:
        """Wait for all pending synthesis tasks."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


__all__ = ["AudioCallback", "SpeechDispatcher"]
