"""Anthropic Messages API format and stream event decoding.

Canonical blocks are already Anthropic-shaped, so conversion is mostly a
serialization step. With ``cache_last_user_turns`` the last content block of
the last two user messages gets an ephemeral ``cache_control`` marker; plain
string content is expanded into a single text block to carry it.
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Sequence

from ..base.chunks import StreamChunk, TextChunk, UsageChunk
from ..base.models import ContentBlock, ImageBlock, Message, TextBlock, ToolResultBlock, ToolUseBlock
from ._fields import as_int, get_field

EPHEMERAL = {"type": "ephemeral"}


def _image(block: ImageBlock) -> Dict[str, Any]:
    return {"type": "image", "source": {"type": "base64", "media_type": block.media_type, "data": block.data}}


def block_to_anthropic(block: ContentBlock) -> Dict[str, Any]:
    if isinstance(block, TextBlock):
        return {"type": "text", "text": block.text}
    if isinstance(block, ImageBlock):
        return _image(block)
    if isinstance(block, ToolUseBlock):
        return {"type": "tool_use", "id": block.id, "name": block.name, "input": dict(block.input)}
    if isinstance(block, ToolResultBlock):
        content: Any = block.content
        if not isinstance(content, str):
            content = [block_to_anthropic(p) for p in content]
        out: Dict[str, Any] = {"type": "tool_result", "tool_use_id": block.tool_use_id, "content": content}
        if block.is_error:
            out["is_error"] = True
        return out
    raise TypeError(f"unsupported content block {block!r}")


def _last_user_indices(messages: Sequence[Message], count: int = 2) -> List[int]:
    return [i for i, m in enumerate(messages) if m.role == "user"][-count:]


def convert_to_anthropic_messages(
    messages: Sequence[Message],
    *,
    cache_last_user_turns: bool = False,
) -> List[Dict[str, Any]]:
    marked = set(_last_user_indices(messages)) if cache_last_user_turns else set()
    out: List[Dict[str, Any]] = []
    for index, message in enumerate(messages):
        if index not in marked:
            content: Any = (
                message.content
                if isinstance(message.content, str)
                else [block_to_anthropic(b) for b in message.content]
            )
            out.append({"role": message.role, "content": content})
            continue
        blocks = [block_to_anthropic(b) for b in message.blocks()]
        if blocks:
            blocks[-1] = {**blocks[-1], "cache_control": EPHEMERAL}
        out.append({"role": message.role, "content": blocks})
    return out


def system_blocks(system_prompt: str, *extra: str, cache: bool = False) -> List[Dict[str, Any]]:
    """System prompt (and optional extra context) as text blocks, optionally cache-marked."""
    blocks = []
    for text in (system_prompt, *extra):
        block: Dict[str, Any] = {"type": "text", "text": text}
        if cache:
            block["cache_control"] = EPHEMERAL
        blocks.append(block)
    return blocks


def anthropic_event_to_chunks(event: Any) -> Iterator[StreamChunk]:
    """Decode one Messages API stream event.

    ``message_delta`` usage carries only the running output count; callers that
    need cumulative totals merge it with the ``message_start`` usage.
    """
    kind = get_field(event, "type")
    if kind == "message_start":
        usage = get_field(event, "message", "usage")
        yield UsageChunk(
            input_tokens=as_int(get_field(usage, "input_tokens")),
            output_tokens=as_int(get_field(usage, "output_tokens")),
            cache_write_tokens=as_int(get_field(usage, "cache_creation_input_tokens")) or None,
            cache_read_tokens=as_int(get_field(usage, "cache_read_input_tokens")) or None,
        )
    elif kind == "message_delta":
        yield UsageChunk(output_tokens=as_int(get_field(event, "usage", "output_tokens")))
    elif kind == "content_block_start":
        block = get_field(event, "content_block")
        if get_field(block, "type") == "text":
            if as_int(get_field(event, "index")) > 0:
                # multiple text blocks are separated by a line break
                yield TextChunk(text="\n")
            text = get_field(block, "text", default="")
            # an empty opener (text arrives through deltas) yields no chunk
            if text:
                yield TextChunk(text=text)
    elif kind == "content_block_delta":
        delta = get_field(event, "delta")
        if get_field(delta, "type") == "text_delta":
            yield TextChunk(text=get_field(delta, "text", default=""))


__all__ = [
    "EPHEMERAL",
    "block_to_anthropic",
    "convert_to_anthropic_messages",
    "system_blocks",
    "anthropic_event_to_chunks",
]
