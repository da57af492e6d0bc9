"""Message format for DeepSeek-R1 style reasoning models.

R1 rejects consecutive messages with the same role, so they are merged:
string contents join with a newline, otherwise both sides become part lists
and concatenate. Tool blocks degrade to their textual summaries.
"""
from __future__ import annotations

from typing import Any, Dict, List, Sequence, Union

from ..base.models import ImageBlock, Message
from .openai_format import image_part, text_part
from .simple_format import block_to_text

Content = Union[str, List[Dict[str, Any]]]


def _to_content(message: Message) -> Content:
    if isinstance(message.content, str):
        return message.content
    return [
        image_part(b) if isinstance(b, ImageBlock) else text_part(block_to_text(b))
        for b in message.content
    ]


def _as_parts(content: Content) -> List[Dict[str, Any]]:
    return [text_part(content)] if isinstance(content, str) else list(content)


def convert_to_r1_format(messages: Sequence[Message]) -> List[Dict[str, Any]]:
    merged: List[Dict[str, Any]] = []
    for message in messages:
        content = _to_content(message)
        if merged and merged[-1]["role"] == message.role:
            last = merged[-1]
            if isinstance(last["content"], str) and isinstance(content, str):
                last["content"] = f"{last['content']}\n{content}"
            else:
                last["content"] = _as_parts(last["content"]) + _as_parts(content)
            continue
        merged.append({"role": message.role, "content": content})
    return merged


__all__ = ["convert_to_r1_format"]
