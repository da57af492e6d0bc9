"""Shape-tolerant field access for SDK objects and decoded JSON alike."""
from __future__ import annotations

from typing import Any, Mapping


def get_field(obj: Any, *path: str, default: Any = None) -> Any:
    """Walk ``path`` through mappings or attributes; ``default`` on any gap.

    ``get_field(event, "message", "usage", "input_tokens")`` works for both
    ``{"message": {"usage": {...}}}`` and SDK objects exposing attributes.
    """
    cur = obj
    for name in path:
        if cur is None:
            return default
        if isinstance(cur, Mapping):
            cur = cur.get(name)
        else:
            cur = getattr(cur, name, None)
    return default if cur is None else cur


def as_int(value: Any) -> int:
    """Return ``value`` as a non-negative int; anything else is 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float) and value == value and value not in (float("inf"), float("-inf")):
        return max(int(value), 0)
    return 0
