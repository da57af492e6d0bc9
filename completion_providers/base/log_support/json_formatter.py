"""One-JSON-object-per-line formatter for the ``providers`` logger.

Events from ``log_event`` arrive as a JSON object in ``record.msg``; their
keys are merged into the top level instead of being nested under ``msg``.
Plain text messages keep the ``msg`` key.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict

ISO = "%Y-%m-%dT%H:%M:%S.%fZ"

# attributes every LogRecord carries; anything else came in through ``extra=``
_RECORD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", None, None).__dict__) | {"message", "asctime"}


def _decode_event(text: str) -> Dict[str, Any]:
    if not text.startswith("{"):
        return {"msg": text}
    try:
        decoded = json.loads(text)
    except ValueError:
        return {"msg": text}
    return decoded if isinstance(decoded, dict) else {"msg": text}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(ISO),
            "level": record.levelname,
            "logger": record.name,
        }
        line.update(_decode_event(record.getMessage()))
        for key, value in vars(record).items():
            if key in _RECORD_ATTRS or key.startswith("_"):
                continue
            line.setdefault(key, value)
        if record.exc_info:
            line["exc"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


__all__ = ["JsonFormatter", "ISO"]
