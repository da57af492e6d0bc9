"""Per-request fields attached to every structured event.

A stream, a usage lookup and a cache refresh tick each build one
:class:`LogContext` and pass it to ``log_event``; unset fields never reach
the emitted line.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class LogContext:
    provider: Optional[str] = None
    model: Optional[str] = None
    request_id: Optional[str] = None
    response_id: Optional[str] = None
    session_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into event fields; ``extra`` entries never shadow named ones."""
        named = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "extra"}
        merged = {k: v for k, v in self.extra.items() if v is not None and k not in named}
        merged.update({k: v for k, v in named.items() if v is not None})
        return merged


__all__ = ["LogContext"]
