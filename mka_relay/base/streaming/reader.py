"""Event stream reader: decoder + parser + pushback loop.

:class:`EventStreamReader` owns one :class:`TransportDecoder` and turns raw
body chunks into stream events. It implements the pushback policy for
``data:`` lines whose JSON does not parse:

1. No further complete line buffered yet: the line is pushed back into the
   decoder and reading stops until the next chunk arrives. Partial JSON is
   never dropped while more bytes may still complete it.
2. A following complete line exists: the fragment is retried joined with that
   line, which recovers a payload split by a stray newline. When the join
   parses, both lines are consumed. Otherwise the fragment is reported as
   :class:`Malformed` and the following line is processed normally.
3. At end of stream a still-pending fragment is :class:`Malformed`.

After :class:`Done` every further line is ignored. A malformed line never
affects deltas that follow it.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from ..log_support import LogContext
from ..logging import get_logger, log_event
from ..models import Comment, Done, Incomplete, Malformed, StreamEvent
from .decoder import TransportDecoder
from .metrics import StreamMetrics
from .parser import EventParser, ParseOutcome

_logger = get_logger("relay.stream")

# Marker returned while a pushed-back fragment waits for more bytes.
_WAIT = object()


class EventStreamReader:
    """Decode one response body into stream events."""

    def __init__(
        self,
        *,
        decoder: Optional[TransportDecoder] = None,
        parser: Optional[EventParser] = None,
        metrics: Optional[StreamMetrics] = None,
        ctx: Optional[LogContext] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._decoder = decoder or TransportDecoder()
        self._parser = parser or EventParser()
        self.metrics = metrics or StreamMetrics()
        self._ctx = ctx
        self._logger = logger or _logger
        self._done = False
        self._finished = False

    @property
    def done(self) -> bool:
        """True once ``data: [DONE]`` was read."""
        return self._done

    def feed(self, chunk: bytes) -> List[StreamEvent]:
        """Consume one body chunk and return the events it completed."""
        if self._done:
            return []
        self._decoder.feed(chunk)
        return self._drain(final=False)

    def finish(self) -> List[StreamEvent]:
        """Signal end of body; resolve pending fragments and the tail."""
        if self._finished:
            return []
        self._finished = True
        events = [] if self._done else self._drain(final=True)
        tail = self._decoder.close()
        if self._done or not tail.strip():
            return events
        if isinstance(self._parser.parse(tail), Done):
            self._done = True
            events.append(Done())
        else:
            self.metrics.malformed += 1
            log_event(self._logger, "stream.unterminated_tail", self._ctx, level=logging.WARNING, size=len(tail))
        return events

    def _drain(self, *, final: bool) -> List[StreamEvent]:
        events: List[StreamEvent] = []
        while not self._done:
            line = self._decoder.next_line()
            if line is None:
                break
            outcome: object = self._parser.parse(line)
            if isinstance(outcome, Incomplete):
                outcome = self._resolve_incomplete(outcome, final=final)
                if outcome is _WAIT:
                    break
            if outcome is None:
                continue
            if isinstance(outcome, Malformed):
                self._report_malformed(outcome)
            elif isinstance(outcome, Done):
                self._done = True
            events.append(outcome)  # type: ignore[arg-type]
        return events

    def _resolve_incomplete(self, pending: Incomplete, *, final: bool) -> object:
        following = self._decoder.peek_line()
        if following is None:
            if final:
                return Malformed(pending.raw_line)
            self._decoder.push_back(pending.raw_line)
            self.metrics.pushbacks += 1
            log_event(
                self._logger,
                "stream.pushback",
                self._ctx,
                level=logging.DEBUG,
                size=len(pending.raw_line),
            )
            return _WAIT
        joined: ParseOutcome = self._parser.parse(pending.raw_line + following)
        if isinstance(joined, (Incomplete, Malformed, Comment)):
            return Malformed(pending.raw_line)
        self._decoder.next_line()
        return joined

    def _report_malformed(self, event: Malformed) -> None:
        self.metrics.malformed += 1
        log_event(
            self._logger,
            "stream.malformed_line",
            self._ctx,
            level=logging.WARNING,
            line=event.raw_line[:200],
        )


__all__ = ["EventStreamReader"]
