"""Prompt-cache markers for OpenAI-shaped requests routed to Anthropic models.

Gateways forward ``cache_control`` on content parts to Anthropic. The system
message and the last text part of the last two user messages are marked.
"""
from __future__ import annotations

import copy
from typing import Any, Dict, List, Sequence

from .anthropic_format import EPHEMERAL


def apply_openai_cache_markers(messages: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return a marked copy of ``messages``; the input is not mutated."""
    out = copy.deepcopy(list(messages))
    for message in out:
        if message.get("role") == "system" and isinstance(message.get("content"), str):
            message["content"] = [{"type": "text", "text": message["content"], "cache_control": dict(EPHEMERAL)}]
    for message in [m for m in out if m.get("role") == "user"][-2:]:
        content = message.get("content")
        if isinstance(content, str):
            message["content"] = content = [{"type": "text", "text": content}]
        text_parts = [p for p in content if p.get("type") == "text"]
        if not text_parts:
            # "..." keeps the marker on a text part when the turn is images only
            text_parts = [{"type": "text", "text": "..."}]
            content.append(text_parts[0])
        text_parts[-1]["cache_control"] = dict(EPHEMERAL)
    return out


__all__ = ["apply_openai_cache_markers"]
