"""Request building and usage merging shared by the Anthropic-protocol adapters."""
from __future__ import annotations

from dataclasses import replace
from typing import Any, AsyncIterable, AsyncGenerator, Optional

from ..base.chunks import StreamChunk, UsageChunk
from ..base.models import ModelInfo
from ..config.defaults import ANTHROPIC_FALLBACK_MAX_TOKENS


def max_tokens_for(info: ModelInfo) -> int:
    return info.max_tokens if info.max_tokens and info.max_tokens > 0 else ANTHROPIC_FALLBACK_MAX_TOKENS


async def with_cumulative_usage(chunks: AsyncIterable[StreamChunk]) -> AsyncGenerator[StreamChunk, None]:
    """Rewrite ``message_delta`` usage into request totals.

    The start event carries input and cache counters; later deltas carry only
    the running output count. Each later usage chunk is re-emitted with the
    start counters filled in so the final usage chunk holds the totals.
    """
    start: Optional[UsageChunk] = None
    async for chunk in chunks:
        if isinstance(chunk, UsageChunk):
            if start is None:
                start = chunk
            else:
                chunk = replace(start, output_tokens=chunk.output_tokens)
        yield chunk


def first_text(response: Any) -> str:
    """Text of the first content block of a non-streaming response, ``""`` otherwise."""
    content = getattr(response, "content", None) or []
    if not content:
        return ""
    block = content[0]
    return getattr(block, "text", "") if getattr(block, "type", None) == "text" else ""


__all__ = ["max_tokens_for", "with_cumulative_usage", "first_text"]
