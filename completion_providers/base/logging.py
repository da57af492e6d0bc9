"""Structured logging for the completion core.

Every module asks :func:`get_logger` for a ``providers.<area>`` logger. Those
carry no handlers; records propagate to the shared ``providers`` logger,
which writes one JSON object per line to stderr and does not propagate to
the root logger. ``PROVIDERS_LOG_LEVEL`` sets its level.

Events are emitted with :func:`log_event` (``None`` fields dropped) or, for
stream lifecycle and usage reporting, :func:`normalized_log_event`, which
always carries ``structured``, ``phase``, ``attempt``, ``emitted`` and
``tokens`` so log consumers can rely on one shape across adapters.
"""
from __future__ import annotations

import contextlib
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .log_support import JsonFormatter, LogContext

BASE_LOGGER_NAME = "providers"
LEVEL_ENV = "PROVIDERS_LOG_LEVEL"

_CONSOLE_MARK = "_providers_console"
_FILE_MARK = "_providers_file"
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}
# rotating log file: 10MB x 5 backups
_FILE_MAX_BYTES = 10 * 1024 * 1024
_FILE_BACKUPS = 5


def _parse_level(value: Union[str, int, None], default: int = logging.INFO) -> int:
    if isinstance(value, int):
        return value
    if not value:
        return default
    return _LEVELS.get(value.strip().upper(), default)


def _formatter(json_mode: bool) -> logging.Formatter:
    return JsonFormatter() if json_mode else logging.Formatter(_PLAIN_FORMAT)


def _console_handler(level: int, json_mode: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(_formatter(json_mode))
    setattr(handler, _CONSOLE_MARK, True)
    return handler


def _managed(logger: logging.Logger, mark: str) -> Iterable[logging.Handler]:
    return [h for h in logger.handlers if getattr(h, mark, False)]


def _drop_handler(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.removeHandler(handler)
    with contextlib.suppress(OSError):
        handler.close()


def _base_logger(json_mode: bool, level: int) -> logging.Logger:
    logger = logging.getLogger(BASE_LOGGER_NAME)
    wanted = _parse_level(os.getenv(LEVEL_ENV), default=level)
    consoles = _managed(logger, _CONSOLE_MARK)
    if not consoles:
        logger.handlers[:] = [_console_handler(wanted, json_mode)]
        logger.propagate = False
        logger.setLevel(wanted)
        return logger

    if logger.level != wanted:
        logger.setLevel(wanted)
    for handler in consoles:
        stream = getattr(handler, "stream", None)
        if stream is None or getattr(stream, "closed", False):
            # stderr was swapped out underneath us (pytest capture does this)
            logger.removeHandler(handler)
            logger.addHandler(_console_handler(wanted, json_mode))
        else:
            handler.setLevel(wanted)
    return logger


def get_logger(name: str = BASE_LOGGER_NAME, json_mode: bool = True, level: int = logging.INFO) -> logging.Logger:
    """Return ``name`` wired to the shared ``providers`` logger.

    Names should live under ``providers.`` (``providers.anthropic``,
    ``providers.cache.refresh``) so records reach the shared handler.
    """
    base = _base_logger(json_mode, level)
    if name == BASE_LOGGER_NAME:
        return base
    logger = logging.getLogger(name)
    for handler in _managed(logger, _CONSOLE_MARK):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    return logger


def configure_logger(
    *,
    level: Union[int, str, None] = None,
    file_path: Optional[str] = None,
    json_mode: bool = True,
    logger_name: str = BASE_LOGGER_NAME,
) -> logging.Logger:
    """Adjust the shared logger at runtime.

    ``level`` (name or number) is applied to the logger and its handlers;
    ``None`` keeps the current level. ``file_path`` attaches a rotating file
    handler, reusing one already pointed at the same file; ``None`` detaches
    any file handler previously attached here.
    """
    logger = get_logger(logger_name, json_mode=json_mode)
    if level is not None:
        logger.setLevel(_parse_level(level, default=logger.level))
        for handler in logger.handlers:
            handler.setLevel(logger.level)

    target = os.path.abspath(os.path.expanduser(file_path)) if file_path else None
    keep: Optional[logging.Handler] = None
    for handler in _managed(logger, _FILE_MARK):
        if target is not None and getattr(handler, "baseFilename", None) == target:
            keep = handler
        else:
            _drop_handler(logger, handler)
    if target is None:
        return logger

    if keep is None:
        os.makedirs(os.path.dirname(target), exist_ok=True)
        keep = RotatingFileHandler(target, maxBytes=_FILE_MAX_BYTES, backupCount=_FILE_BACKUPS, encoding="utf-8")
        setattr(keep, _FILE_MARK, True)
        logger.addHandler(keep)
    keep.setFormatter(_formatter(json_mode))
    keep.setLevel(logger.level)
    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: Optional[LogContext] = None,
    *,
    level: int = logging.INFO,
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Emit ``event`` as a JSON message.

    Context fields come first and explicit ``fields`` override them. Fields
    set to ``None`` are dropped unless ``keep_none`` is true.
    """
    if not logger.isEnabledFor(level):
        return
    payload: Dict[str, Any] = {"event": event}
    if ctx is not None:
        payload.update(ctx.to_dict())
    payload.update(fields if keep_none else {k: v for k, v in fields.items() if v is not None})
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


REQUIRED_NORMALIZED_KEYS = (
    "structured",
    "phase",
    "attempt",
    "error_code",
    "emitted",
    "tokens",
)


def _token_counts(tokens: Any) -> Optional[Dict[str, Any]]:
    if tokens is None:
        return None
    if isinstance(tokens, Mapping):
        return dict(tokens)
    if isinstance(tokens, (list, tuple)):
        with contextlib.suppress(TypeError, ValueError):
            return dict(tokens)
    return {"value": repr(tokens)}


def normalized_log_event(  # noqa: PLR0913
    logger: logging.Logger,
    event: str,
    ctx: Optional[LogContext] = None,
    *,
    phase: str,
    attempt: Optional[int] = None,
    error_code: Optional[str] = None,
    emitted: Union[int, bool, None] = None,
    tokens: Any = None,
    structured: bool = True,
    level: int = logging.INFO,
    **extra_fields: Any,
) -> None:
    """Emit ``event`` with the normalized key set.

    ``error_code`` appears only when given. ``extra_fields`` that are ``None``
    or that collide with a set normalized key are ignored.
    """
    fields: Dict[str, Any] = {
        "structured": structured,
        "phase": phase,
        "attempt": attempt,
        "emitted": emitted,
        "tokens": _token_counts(tokens),
    }
    if error_code is not None:
        fields["error_code"] = error_code
    for key, value in extra_fields.items():
        if value is not None and fields.get(key) is None:
            fields[key] = value
    log_event(logger, event, ctx, level=level, keep_none=True, **fields)


__all__ = [
    "LogContext",
    "get_logger",
    "configure_logger",
    "log_event",
    "normalized_log_event",
    "REQUIRED_NORMALIZED_KEYS",
]
