"""Event parser for the relay's ``data:``-framed event stream.

Each complete line maps to one outcome:

- blank or ``:``-prefixed line: :class:`Comment` (keep-alive, ignored)
- not starting with ``data: ``: :class:`Malformed`
- ``data: [DONE]``: :class:`Done`
- payload that is not valid JSON yet: :class:`Incomplete` (the reader decides
  between pushback, join retry and ``Malformed``)
- JSON that is not an object: :class:`Malformed`
- ``choices[0].delta.content`` non-empty string: :class:`ContentDelta`
- anything else (role-only chunks, empty content, finish chunks): ``None``

The parser is stateless and pure; all buffering lives in the decoder.
"""
from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Union

from ..models import Comment, ContentDelta, Done, Incomplete, Malformed, StreamEvent

DATA_PREFIX = "data: "
DONE_MARKER = "[DONE]"

ParseOutcome = Optional[Union[StreamEvent, Incomplete]]


def _content_of(obj: Mapping[str, Any]) -> Optional[str]:
    choices = obj.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return None
    content = delta.get("content")
    if isinstance(content, str) and content:
        return content
    return None


class EventParser:
    """Map one decoded line to a stream event."""

    def parse(self, line: str) -> ParseOutcome:
        if not line.strip() or line.startswith(":"):
            return Comment(line)
        if not line.startswith(DATA_PREFIX):
            return Malformed(line)
        payload = line[len(DATA_PREFIX):].strip()
        if payload == DONE_MARKER:
            return Done()
        try:
            obj = json.loads(payload)
        except json.JSONDecodeError:
            return Incomplete(line)
        if not isinstance(obj, dict):
            return Malformed(line)
        content = _content_of(obj)
        return ContentDelta(content) if content is not None else None


__all__ = ["DATA_PREFIX", "DONE_MARKER", "EventParser", "ParseOutcome"]
