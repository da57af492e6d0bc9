"""OpenAI chat-completions message format and frame decoding.

Canonical messages map to ``messages=[...]`` dicts accepted by every
OpenAI-compatible backend:

* plain string content stays a string;
* user text/images become ``text`` / ``image_url`` parts, images as data URIs;
* user tool results become ``role="tool"`` messages placed before the rest of
  the user content;
* assistant tool uses become ``tool_calls`` with JSON-encoded arguments and the
  assistant text collapses to one string.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterator, List, Optional, Sequence

from ..base.chunks import ReasoningChunk, StreamChunk, TextChunk, UsageChunk
from ..base.models import ImageBlock, Message, TextBlock, ToolResultBlock, ToolUseBlock
from ._fields import as_int, get_field

# Tool messages carry text only; the image follows in a user message.
TOOL_IMAGE_PLACEHOLDER = "(see following user message for image)"


def text_part(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}


def image_part(block: ImageBlock) -> Dict[str, Any]:
    return {"type": "image_url", "image_url": {"url": block.data_uri()}}


def _tool_message(block: ToolResultBlock) -> Dict[str, Any]:
    if isinstance(block.content, str):
        content = block.content
    else:
        content = "\n".join(
            part.text if isinstance(part, TextBlock) else TOOL_IMAGE_PLACEHOLDER
            for part in block.content
        )
    return {"role": "tool", "tool_call_id": block.tool_use_id, "content": content}


def _convert_user(message: Message) -> List[Dict[str, Any]]:
    tool_messages: List[Dict[str, Any]] = []
    parts: List[Dict[str, Any]] = []
    tool_images: List[Dict[str, Any]] = []
    for block in message.blocks():
        if isinstance(block, ToolResultBlock):
            tool_messages.append(_tool_message(block))
            if not isinstance(block.content, str):
                tool_images.extend(image_part(p) for p in block.content if isinstance(p, ImageBlock))
        elif isinstance(block, ImageBlock):
            parts.append(image_part(block))
        elif isinstance(block, TextBlock):
            parts.append(text_part(block.text))
        elif isinstance(block, ToolUseBlock):
            # users do not issue tool calls
            parts.append(text_part(f"[Tool Use: {block.name}]"))
    out = list(tool_messages)
    parts.extend(tool_images)
    if parts:
        out.append({"role": "user", "content": parts})
    return out


def _convert_assistant(message: Message) -> Dict[str, Any]:
    texts: List[str] = []
    tool_calls: List[Dict[str, Any]] = []
    for block in message.blocks():
        if isinstance(block, TextBlock):
            texts.append(block.text)
        elif isinstance(block, ToolUseBlock):
            tool_calls.append(
                {
                    "id": block.id,
                    "type": "function",
                    "function": {"name": block.name, "arguments": json.dumps(dict(block.input))},
                }
            )
        # assistants cannot send images or tool results
    out: Dict[str, Any] = {"role": "assistant", "content": "\n".join(texts) if texts else None}
    if tool_calls:
        out["tool_calls"] = tool_calls
    return out


def convert_to_openai_messages(messages: Sequence[Message]) -> List[Dict[str, Any]]:
    """Convert canonical messages to OpenAI chat-completions messages."""
    out: List[Dict[str, Any]] = []
    for message in messages:
        if isinstance(message.content, str):
            out.append({"role": message.role, "content": message.content})
        elif message.role == "assistant":
            out.append(_convert_assistant(message))
        else:
            out.extend(_convert_user(message))
    return out


def openai_usage_chunk(usage: Any, *, include_cache: bool = False, total_cost: Optional[float] = None) -> UsageChunk:
    """Build a usage chunk from a ``prompt_tokens``/``completion_tokens`` payload.

    With ``include_cache`` the Anthropic-style ``cache_creation_input_tokens``
    and ``cache_read_input_tokens`` extensions are read too.
    """
    cache: Dict[str, Any] = {}
    if include_cache:
        cache = {
            "cache_write_tokens": as_int(get_field(usage, "cache_creation_input_tokens")),
            "cache_read_tokens": as_int(get_field(usage, "cache_read_input_tokens")),
        }
    return UsageChunk(
        input_tokens=as_int(get_field(usage, "prompt_tokens")),
        output_tokens=as_int(get_field(usage, "completion_tokens")),
        total_cost=total_cost,
        **cache,
    )


def openai_frame_to_chunks(frame: Any, *, include_cache_usage: bool = False) -> Iterator[StreamChunk]:
    """Decode one streaming frame (SDK object or decoded JSON).

    Yields text for ``delta.content``, reasoning for ``delta.reasoning_content``
    or ``delta.reasoning`` and usage when the frame carries ``usage``.
    """
    choices = get_field(frame, "choices", default=[])
    delta = get_field(choices[0], "delta") if choices else None
    content = get_field(delta, "content")
    if content:
        yield TextChunk(text=content)
    reasoning = get_field(delta, "reasoning_content") or get_field(delta, "reasoning")
    if reasoning:
        yield ReasoningChunk(text=reasoning)
    usage = get_field(frame, "usage")
    if usage is not None:
        yield openai_usage_chunk(usage, include_cache=include_cache_usage)


def openai_response_text(response: Any) -> str:
    """Text of a non-streaming completion response, ``""`` when absent."""
    choices = get_field(response, "choices", default=[])
    if not choices:
        return ""
    return get_field(choices[0], "message", "content", default="")


__all__ = [
    "TOOL_IMAGE_PLACEHOLDER",
    "text_part",
    "image_part",
    "convert_to_openai_messages",
    "openai_usage_chunk",
    "openai_frame_to_chunks",
    "openai_response_text",
]
