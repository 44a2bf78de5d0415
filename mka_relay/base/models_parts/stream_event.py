"""
Events produced by the event parser.

`StreamEvent` is the tagged variant consumed by the accumulator:
``ContentDelta`` | ``Done`` | ``Comment`` | ``Malformed``. ``Incomplete`` is a
parser outcome only; the stream reader resolves it (pushback, join retry or
downgrade to ``Malformed``) before anything reaches the accumulator.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class ContentDelta:
    """A non-empty text fragment to append to the assistant message."""

    text: str


@dataclass(frozen=True)
class Done:
    """End-of-stream sentinel (``data: [DONE]``)."""


@dataclass(frozen=True)
class Comment:
    """Blank or ``:``-prefixed keep-alive line."""

    raw: str


@dataclass(frozen=True)
class Malformed:
    """A line that could not be interpreted; logged and skipped."""

    raw_line: str


@dataclass(frozen=True)
class Incomplete:
    """A ``data:`` line whose JSON payload did not parse yet."""

    raw_line: str


StreamEvent = Union[ContentDelta, Done, Comment, Malformed]

__all__ = ["Comment", "ContentDelta", "Done", "Incomplete", "Malformed", "StreamEvent"]
