"""AWS Bedrock Converse API message format and stream event decoding.

Converse messages carry ``{"text": ...}`` content blocks only here; images
and tool blocks degrade to the same textual summaries as the simple format.
Each canonical message converts independently into one Converse message.
"""
from __future__ import annotations

from typing import Any, Dict, Iterator, List, Sequence

from ..base.chunks import StreamChunk, TextChunk, UsageChunk
from ..base.models import Message
from ._fields import as_int, get_field
from .simple_format import block_to_text


def convert_to_bedrock_converse_messages(messages: Sequence[Message]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for message in messages:
        role = "assistant" if message.role == "assistant" else "user"
        if isinstance(message.content, str):
            content = [{"text": message.content}]
        else:
            content = [{"text": block_to_text(b)} for b in message.content]
        out.append({"role": role, "content": content})
    return out


def bedrock_event_to_chunks(event: Any) -> Iterator[StreamChunk]:
    """Decode one ``converse_stream`` event.

    ``metadata.usage`` yields usage; ``contentBlockStart.start.text`` and
    ``contentBlockDelta.delta.text`` yield text. ``messageStop`` and other
    events carry nothing for the canonical stream.
    """
    usage = get_field(event, "metadata", "usage")
    if usage is not None:
        yield UsageChunk(
            input_tokens=as_int(get_field(usage, "inputTokens")),
            output_tokens=as_int(get_field(usage, "outputTokens")),
        )
        return
    text = get_field(event, "contentBlockStart", "start", "text")
    if text is None:
        text = get_field(event, "contentBlockDelta", "delta", "text")
    if text is not None:
        yield TextChunk(text=text)


__all__ = ["convert_to_bedrock_converse_messages", "bedrock_event_to_chunks"]
