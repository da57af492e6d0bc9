"""Google Gemini content format.

Roles map ``assistant -> model``. Images become ``inline_data`` parts, tool
uses ``function_call`` parts and tool results ``function_response`` parts
named after the tool-use id prefix (the text before the first ``-``). Image
parts of a tool result follow the response part, which notes them in its
text.
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Sequence

from ..base.chunks import StreamChunk, TextChunk, UsageChunk
from ..base.models import ContentBlock, ImageBlock, Message, TextBlock, ToolResultBlock, ToolUseBlock
from ._fields import as_int, get_field

IMAGE_FOLLOWS_NOTE = "\n\n(See next part for image)"


def _inline_data(block: ImageBlock) -> Dict[str, Any]:
    return {"inline_data": {"data": block.data, "mime_type": block.media_type}}


def _function_response(name: str, content: str) -> Dict[str, Any]:
    return {"function_response": {"name": name, "response": {"name": name, "content": content}}}


def _tool_result_parts(block: ToolResultBlock) -> List[Dict[str, Any]]:
    name = block.tool_use_id.split("-")[0]
    if not block.content:
        return []
    if isinstance(block.content, str):
        return [_function_response(name, block.content)]
    texts = [p.text for p in block.content if isinstance(p, TextBlock)]
    images = [p for p in block.content if isinstance(p, ImageBlock)]
    text = "\n\n".join(texts)
    if images:
        text += IMAGE_FOLLOWS_NOTE
    return [_function_response(name, text)] + [_inline_data(img) for img in images]


def convert_content_to_gemini(content: Any) -> List[Dict[str, Any]]:
    if isinstance(content, str):
        return [{"text": content}]
    parts: List[Dict[str, Any]] = []
    block: ContentBlock
    for block in content:
        if isinstance(block, TextBlock):
            parts.append({"text": block.text})
        elif isinstance(block, ImageBlock):
            parts.append(_inline_data(block))
        elif isinstance(block, ToolUseBlock):
            parts.append({"function_call": {"name": block.name, "args": dict(block.input)}})
        elif isinstance(block, ToolResultBlock):
            parts.extend(_tool_result_parts(block))
    return parts


def convert_message_to_gemini(message: Message) -> Dict[str, Any]:
    return {
        "role": "model" if message.role == "assistant" else "user",
        "parts": convert_content_to_gemini(message.content),
    }


def unescape_gemini_content(content: str) -> str:
    """Undo Gemini's double escaping of newlines, quotes, CR and tabs."""
    return (
        content.replace("\\n", "\n")
        .replace("\\'", "'")
        .replace('\\"', '"')
        .replace("\\r", "\r")
        .replace("\\t", "\t")
    )


def gemini_usage_chunk(response: Any) -> UsageChunk:
    meta = get_field(response, "usage_metadata")
    return UsageChunk(
        input_tokens=as_int(get_field(meta, "prompt_token_count")),
        output_tokens=as_int(get_field(meta, "candidates_token_count")),
    )


def gemini_response_text(response: Any) -> str:
    # ``response.text`` raises on candidates without text parts; read parts directly.
    candidates = get_field(response, "candidates", default=[])
    if not candidates:
        return ""
    parts = get_field(candidates[0], "content", "parts", default=[])
    return "".join(get_field(p, "text", default="") for p in parts)


def gemini_response_to_chunks(chunk: Any) -> Iterator[StreamChunk]:
    """Decode one streamed ``GenerateContentResponse``; text only, usage is read at the end."""
    text = gemini_response_text(chunk)
    if text:
        yield TextChunk(text=text)


__all__ = [
    "IMAGE_FOLLOWS_NOTE",
    "convert_content_to_gemini",
    "convert_message_to_gemini",
    "unescape_gemini_content",
    "gemini_usage_chunk",
    "gemini_response_text",
    "gemini_response_to_chunks",
]
