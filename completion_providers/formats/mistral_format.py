"""Mistral chat message format and SSE frame decoding."""
from __future__ import annotations

import json
from typing import Any, Dict, Iterator, List, Sequence

from ..base.chunks import StreamChunk, TextChunk, UsageChunk
from ..base.models import ImageBlock, Message, TextBlock
from ._fields import as_int, get_field
from .simple_format import block_to_text


def convert_to_mistral_messages(messages: Sequence[Message]) -> List[Dict[str, Any]]:
    """Assistant turns become text only; user images become ``image_url`` parts.

    Tool blocks degrade to their textual summaries.
    """
    out: List[Dict[str, Any]] = []
    for message in messages:
        if isinstance(message.content, str):
            out.append({"role": message.role, "content": message.content})
            continue
        if message.role == "assistant":
            text = "\n".join(b.text for b in message.content if isinstance(b, TextBlock))
            out.append({"role": "assistant", "content": text})
            continue
        parts: List[Dict[str, Any]] = []
        for block in message.content:
            if isinstance(block, ImageBlock):
                parts.append({"type": "image_url", "image_url": block.data_uri()})
            else:
                parts.append({"type": "text", "text": block_to_text(block)})
        out.append({"role": "user", "content": parts})
    return out


def mistral_content_text(content: Any) -> str:
    """Text of a string or list-of-parts ``content``; non-text parts are dropped."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(get_field(p, "text", default="") for p in content if get_field(p, "type") == "text")
    return ""


def mistral_frame_to_chunks(frame: str) -> Iterator[StreamChunk]:
    """Decode one SSE ``data:`` payload. ``[DONE]`` yields nothing.

    Raises ``json.JSONDecodeError`` for an unparseable payload so the caller
    can skip it.
    """
    if frame.strip() == "[DONE]":
        return
    data = json.loads(frame)
    choices = get_field(data, "choices", default=[])
    if choices:
        text = mistral_content_text(get_field(choices[0], "delta", "content"))
        if text:
            yield TextChunk(text=text)
    usage = get_field(data, "usage")
    if usage is not None:
        yield UsageChunk(
            input_tokens=as_int(get_field(usage, "prompt_tokens")),
            output_tokens=as_int(get_field(usage, "completion_tokens")),
        )


__all__ = ["convert_to_mistral_messages", "mistral_content_text", "mistral_frame_to_chunks"]
