"""Streaming core: transport decoding, event parsing and accumulation."""

from .accumulator import MessageAccumulator
from .decoder import TransportDecoder
from .metrics import StreamMetrics
from .parser import DATA_PREFIX, DONE_MARKER, EventParser
from .reader import EventStreamReader

__all__ = [
    "DATA_PREFIX",
    "DONE_MARKER",
    "EventParser",
    "EventStreamReader",
    "MessageAccumulator",
    "StreamMetrics",
    "TransportDecoder",
]
