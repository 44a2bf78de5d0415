"""Structured logging utilities shared by the relay client and proxy.

Everything logs under the ``relay`` logger. It owns the only console handler
(stderr, JSON by default); named children such as ``relay.client`` or
``relay.proxy`` propagate to it, so a line is never printed twice.

Events are single JSON objects: ``log_event(logger, "relay.start", ctx,
messages=3)`` logs ``{"event": "relay.start", "request_id": ..., "messages":
3}``. Stream lifecycle events go through ``normalized_log_event``, which always
carries ``phase``, ``emitted`` and ``deltas`` (plus ``error_code`` on failure)
so client and proxy streams can be aggregated the same way.

Environment:
    RELAY_LOG_LEVEL    DEBUG / INFO / WARNING / ERROR / CRITICAL (default INFO)
"""
from __future__ import annotations

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from .log_support import JsonFormatter, LogContext


BASE_LOGGER_NAME = "relay"
_CONSOLE_MARK = "_relay_console"
_FILE_MARK = "_relay_file"
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

_LEVELS: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_level(value: str | None, default: int = logging.INFO) -> int:
    if not value:
        return default
    return _LEVELS.get(value.strip().upper(), default)


def _formatter(json_mode: bool) -> logging.Formatter:
    return JsonFormatter() if json_mode else logging.Formatter(_PLAIN_FORMAT)


def _marked(logger: logging.Logger, mark: str) -> list[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, mark, False)]


def _drop(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.removeHandler(handler)
    handler.close()


def _ensure_base_logger(json_mode: bool, level: int) -> logging.Logger:
    """Return the ``relay`` logger with exactly one live console handler."""
    logger = logging.getLogger(BASE_LOGGER_NAME)
    resolved = _parse_level(os.getenv("RELAY_LOG_LEVEL"), default=level)
    logger.setLevel(resolved)
    logger.propagate = False

    console = _marked(logger, _CONSOLE_MARK)
    # pytest swaps sys.stderr between tests; a handler bound to an old stream is replaced.
    live = [h for h in console if getattr(h, "stream", None) is sys.stderr]
    for stale in console:
        if stale not in live:
            _drop(logger, stale)
    if not live:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(_formatter(json_mode))
        setattr(handler, _CONSOLE_MARK, True)
        logger.addHandler(handler)
        live = [handler]
    for handler in live:
        handler.setLevel(resolved)
    return logger


def get_logger(name: str = BASE_LOGGER_NAME, json_mode: bool = True, level: int = logging.INFO) -> logging.Logger:
    """Return ``name`` under the shared ``relay`` hierarchy.

    Children inherit the base level and handler; any console handler attached
    to a child directly is removed.
    """
    base_logger = _ensure_base_logger(json_mode=json_mode, level=level)
    if name == BASE_LOGGER_NAME:
        return base_logger
    logger = logging.getLogger(name)
    for handler in _marked(logger, _CONSOLE_MARK):
        _drop(logger, handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    return logger


def configure_logger(
    *,
    level: int | str | None = None,
    file_path: Optional[str] = None,
    json_mode: bool = True,
) -> logging.Logger:
    """Adjust the shared logger at runtime.

    ``level`` (name or number) replaces the current level. ``file_path``
    attaches a rotating file handler (10 MB x 5) in place of any previously
    attached one; ``None`` detaches it. Foreign handlers are left alone.
    """
    logger = _ensure_base_logger(json_mode=True, level=logging.INFO)
    if level is not None:
        resolved = _parse_level(level, default=logger.level) if isinstance(level, str) else level
        logger.setLevel(resolved)
        for handler in logger.handlers:
            handler.setLevel(resolved)

    for handler in _marked(logger, _FILE_MARK):
        _drop(logger, handler)
    if file_path is None:
        return logger

    path = os.path.abspath(os.path.expanduser(file_path))
    os.makedirs(os.path.dirname(path), exist_ok=True)
    file_handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8")
    file_handler.setFormatter(_formatter(json_mode))
    file_handler.setLevel(logger.level)
    setattr(file_handler, _FILE_MARK, True)
    logger.addHandler(file_handler)
    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    level: int = logging.INFO,
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Log ``{"event": event, **ctx, **fields}`` as one JSON line.

    ``None`` values are dropped unless ``keep_none`` is set.
    """
    payload: Dict[str, Any] = {"event": event}
    if ctx:
        payload |= ctx.to_dict()
    payload |= fields if keep_none else {k: v for k, v in fields.items() if v is not None}
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


REQUIRED_NORMALIZED_KEYS = ("phase", "error_code", "emitted", "deltas")


def normalized_log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    phase: str,
    error_code: str | None = None,
    emitted: bool | None = None,
    deltas: int | None = None,
    level: int = logging.INFO,
    **extra_fields: Any,
) -> None:
    """Log a stream lifecycle event with the normalized keys.

    ``emitted`` and ``deltas`` are always present (``null`` when unknown);
    ``error_code`` only when set. Extra fields never replace normalized ones
    and ``None`` extras are dropped.
    """
    fields: Dict[str, Any] = {"phase": phase, "emitted": emitted, "deltas": deltas}
    if error_code is not None:
        fields["error_code"] = error_code
    for key, value in extra_fields.items():
        if value is not None and key not in fields and key != "error_code":
            fields[key] = value
    log_event(logger, event, ctx, level=level, keep_none=True, **fields)


__all__ = [
    "BASE_LOGGER_NAME",
    "LogContext",
    "REQUIRED_NORMALIZED_KEYS",
    "configure_logger",
    "get_logger",
    "log_event",
    "normalized_log_event",
]
