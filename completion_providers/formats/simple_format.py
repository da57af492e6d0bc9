"""Plain-string message format for backends that accept text only.

Non-text blocks degrade to bracketed summaries (``[Image: image/png]``,
``[Tool Use: read_file]``); tool results contribute their text.
"""
from __future__ import annotations

from typing import Dict, List, Sequence, Union

from ..base.models import ContentBlock, ImageBlock, Message, TextBlock, ToolResultBlock, ToolUseBlock


def describe_image(block: ImageBlock) -> str:
    return f"[Image: {block.media_type}]"


def tool_result_text(block: ToolResultBlock) -> str:
    """Text of a tool result; image parts become summaries, joined by newlines."""
    if isinstance(block.content, str):
        return block.content
    parts = []
    for part in block.content:
        if isinstance(part, TextBlock):
            parts.append(part.text)
        elif isinstance(part, ImageBlock):
            parts.append(describe_image(part))
    return "\n".join(parts)


def block_to_text(block: ContentBlock) -> str:
    if isinstance(block, TextBlock):
        return block.text
    if isinstance(block, ImageBlock):
        return describe_image(block)
    if isinstance(block, ToolUseBlock):
        return f"[Tool Use: {block.name}]"
    if isinstance(block, ToolResultBlock):
        return tool_result_text(block)
    return "[Unsupported content type]"


def convert_to_simple_content(content: Union[str, Sequence[ContentBlock]]) -> str:
    if isinstance(content, str):
        return content
    return "\n".join(block_to_text(b) for b in content)


def convert_to_simple_messages(messages: Sequence[Message]) -> List[Dict[str, str]]:
    return [{"role": m.role, "content": convert_to_simple_content(m.content)} for m in messages]


__all__ = [
    "describe_image",
    "tool_result_text",
    "block_to_text",
    "convert_to_simple_content",
    "convert_to_simple_messages",
]
