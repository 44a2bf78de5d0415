"""JSON formatter for relay log lines.

``log_event`` already renders each message as a JSON object; the formatter
adds timestamp, level and logger name and merges the event keys into the same
object instead of nesting an encoded string under ``msg``.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

ISO = "%Y-%m-%dT%H:%M:%S.%fZ"

# Attributes every LogRecord carries; only caller-supplied ``extra`` keys are copied.
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        out: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).strftime(ISO),
            "level": record.levelname,
            "logger": record.name,
        }
        text = record.getMessage()
        try:
            event = json.loads(text)
        except ValueError:
            event = None
        if isinstance(event, dict):
            out.update(event)
        else:
            out["msg"] = text
        if record.exc_info:
            out["exc"] = self.formatException(record.exc_info)
        for key, value in vars(record).items():
            if key.startswith("_") or key in _STANDARD_ATTRS:
                continue
            out.setdefault(key, value)
        return json.dumps(out, ensure_ascii=False, default=str)


__all__ = ["ISO", "JsonFormatter"]
